"""Root logger setup from LoggingConfig (config.yaml logging.* or LOGGING_* env)."""

import logging

from issuestore.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant; unknown names mean INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


def setup_logging(config: LoggingConfig) -> None:
    """Replace root handlers with one using config.level and config.format."""
    logging.basicConfig(
        level=_resolve_level(config.level),
        format=config.format or DEFAULT_FORMAT,
        force=True,
    )
