"""Logging setup shared by the API, the CLI and the scripts."""

from __future__ import annotations

import logging
from typing import Optional

from housing.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PACKAGE_LOGGER = "housing"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single stderr handler to the ``housing`` logger tree.

    Only the package's own loggers are configured, so uvicorn keeps its
    access log format and stdout stays free for CLI output. Calling again
    with a ``level`` changes the level without adding handlers.
    """
    global _handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(_handler)
        package_logger.propagate = False
        package_logger.setLevel((level or get_settings().log_level).upper())
    elif level:
        package_logger.setLevel(level.upper())
    return package_logger


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
