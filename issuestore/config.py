"""Configuration loading from YAML and environment.

Sections map to pydantic-settings models. Environment variables with the
section prefix (STORE_*, LOGGING_*) take precedence over the YAML file.
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from issuestore.errors import ConfigError

# Injected by load_config so ${VAR} substitution sees a consistent snapshot
_current_env: dict[str, str] = {}


class StoreConfig(BaseSettings):
    """Storage backend settings."""

    model_config = SettingsConfigDict(env_prefix="STORE_", extra="ignore")

    backend: Literal["yaml", "memory"] = Field(default="yaml", description="yaml (durable) or memory")
    data_dir: Path = Field(default=Path(".issuestore"), description="Root directory for the yaml backend")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def _section(raw: dict[str, Any], name: str, env_prefix: str) -> dict[str, Any]:
    """Return one YAML section minus the keys set through the environment.

    Dropped keys fall through to BaseSettings, which reads them from env.
    """
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
    env_keys = {k.upper() for k in _current_env}
    return {k: v for k, v in section.items() if f"{env_prefix}{k}".upper() not in env_keys}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Environment variables (STORE_*, LOGGING_*) win over values in the file.
    A missing file yields defaults, still overridable by env.

    Raises:
        ConfigError: If the file cannot be read or parsed, or is not a mapping
            of mappings with valid values
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    raw: Any = {}
    try:
        if path.is_file():
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(raw).__name__}")
    raw = _substitute_env(raw)

    try:
        return AppConfig(
            store=StoreConfig(**_section(raw, "store", "STORE_")),
            logging=LoggingConfig(**_section(raw, "logging", "LOGGING_")),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
