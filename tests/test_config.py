"""Tests for issuestore.config (load_config, env substitution)."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from issuestore.config import AppConfig, StoreConfig, load_config
from issuestore.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep STORE_* and LOGGING_* from the outer environment out of the tests."""
    for key in ("STORE_BACKEND", "STORE_DATA_DIR", "LOGGING_LEVEL", "LOGGING_FORMAT"):
        monkeypatch.delenv(key, raising=False)


class TestLoadConfig:
    """YAML + environment loading."""

    def test_missing_file_returns_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """No config file means default settings."""
        monkeypatch.delenv("STORE_BACKEND", raising=False)
        monkeypatch.delenv("STORE_DATA_DIR", raising=False)
        config = load_config(tmp_path / "absent.yaml")
        assert isinstance(config, AppConfig)
        assert config.store.backend == "yaml"
        assert config.store.data_dir == Path(".issuestore")
        assert config.logging.level == "INFO"

    def test_reads_sections_from_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """store and logging sections are parsed into their models."""
        monkeypatch.delenv("STORE_DATA_DIR", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "store:\n  backend: memory\n  data_dir: /srv/issues\nlogging:\n  level: DEBUG\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.store.backend == "memory"
        assert config.store.data_dir == Path("/srv/issues")
        assert config.logging.level == "DEBUG"

    def test_substitutes_env_variables(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR} and $VAR values are replaced from the environment."""
        monkeypatch.delenv("STORE_DATA_DIR", raising=False)
        monkeypatch.setenv("ISSUES_HOME", "/data/issues")
        monkeypatch.setenv("ISSUES_LOG_LEVEL", "WARNING")
        path = tmp_path / "config.yaml"
        path.write_text(
            "store:\n  data_dir: ${ISSUES_HOME}\nlogging:\n  level: $ISSUES_LOG_LEVEL\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.store.data_dir == Path("/data/issues")
        assert config.logging.level == "WARNING"

    def test_store_data_dir_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """STORE_DATA_DIR wins over store.data_dir from YAML."""
        monkeypatch.setenv("STORE_DATA_DIR", str(tmp_path / "from-env"))
        path = tmp_path / "config.yaml"
        path.write_text("store:\n  data_dir: /from/file\n", encoding="utf-8")
        assert load_config(path).store.data_dir == tmp_path / "from-env"

    def test_empty_file_returns_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """An empty YAML file is treated like no settings."""
        monkeypatch.delenv("STORE_BACKEND", raising=False)
        monkeypatch.delenv("STORE_DATA_DIR", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).store.backend == "yaml"


    def test_env_overrides_every_file_key(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """STORE_* and LOGGING_* win over the matching YAML keys; others stay."""
        monkeypatch.setenv("STORE_BACKEND", "memory")
        monkeypatch.setenv("LOGGING_LEVEL", "ERROR")
        path = tmp_path / "config.yaml"
        path.write_text(
            "store:\n  backend: yaml\n  data_dir: /from/file\nlogging:\n  level: DEBUG\n  format: '%(message)s'\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.store.backend == "memory"
        assert config.store.data_dir == Path("/from/file")
        assert config.logging.level == "ERROR"
        assert config.logging.format == "%(message)s"

    def test_non_mapping_document_raises_config_error(self, tmp_path: Path) -> None:
        """A bare list or string at the top level is rejected clearly."""
        path = tmp_path / "config.yaml"
        for body in ("- store\n- logging\n", "just a string\n"):
            path.write_text(body, encoding="utf-8")
            with pytest.raises(ConfigError, match="must be a mapping"):
                load_config(path)

    def test_non_mapping_section_raises_config_error(self, tmp_path: Path) -> None:
        """A section that is not a mapping is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("store: yaml\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="store"):
            load_config(path)

    def test_invalid_values_and_yaml_raise_config_error(self, tmp_path: Path) -> None:
        """Unknown backends and unparsable YAML become ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text("store:\n  backend: postgres\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)
        path.write_text("store: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)


class TestStoreConfig:
    """StoreConfig validation and env prefix."""

    def test_unknown_backend_rejected(self) -> None:
        """Only yaml and memory backends exist."""
        with pytest.raises(ValidationError):
            StoreConfig(backend="postgres")

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """STORE_* variables populate StoreConfig."""
        monkeypatch.setenv("STORE_BACKEND", "memory")
        assert StoreConfig().backend == "memory"
