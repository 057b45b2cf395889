"""Logging configuration for the ``reflexion`` logger hierarchy."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "reflexion"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Handler installed by the last configure_logging() call
_installed_handler: logging.Handler | None = None


def configure_logging(level: str | int = "WARNING", stream: TextIO | None = None) -> logging.Logger:
    """Install a single stream handler on the ``reflexion`` logger.

    Calling this again replaces the handler installed by a previous call
    rather than adding another one.

    Args:
        level: Level name or number.
        stream: Destination stream (defaults to stderr).

    Returns:
        The configured package logger.
    """
    global _installed_handler

    logger = reset_logging()
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    _installed_handler = handler
    return logger


def installed_handler() -> logging.Handler | None:
    """The handler installed by configure_logging(), if any."""
    return _installed_handler


def reset_logging() -> logging.Logger:
    """Remove the installed handler and restore the logger's default level."""
    global _installed_handler

    logger = logging.getLogger(LOGGER_NAME)
    if _installed_handler is not None:
        logger.removeHandler(_installed_handler)
        _installed_handler = None
    logger.setLevel(logging.NOTSET)
    return logger


__all__ = ["LOGGER_NAME", "LOG_FORMAT", "configure_logging", "installed_handler", "reset_logging"]
