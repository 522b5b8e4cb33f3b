from __future__ import annotations

# tinker_backend/logs.py
import logging
import os

from .db import read_config_yaml

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_ROOT_LOGGER = "tinker_backend"
_handler: logging.Handler | None = None


def resolve_log_level(level: str | int | None = None) -> int:
    if level is None:
        level = os.environ.get("TINKER_LOG_LEVEL") or read_config_yaml().get("log_level") or "INFO"
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level}")
    return value


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger (idempotent)."""
    global _handler
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(resolve_log_level(level))
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in logger.handlers:
        logger.addHandler(_handler)
    return logger
