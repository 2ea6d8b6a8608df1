"""Shared logging utilities for consistent scoring observability.

Every logger lives under the ``govcon_match`` namespace and writes UTC ISO
timestamps through a single stream handler. The level of all package loggers
can be changed at once with ``set_log_level`` (driven by ``LOG_LEVEL``).

Usage example:
    from govcon_match.observability.logging import get_logger

    logger = get_logger("govcon_match.scoring_service")
    logger.info("Scored %s opportunities", opportunity_count)
"""

from __future__ import annotations

import logging
import time

_ROOT_NAME = "govcon_match"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_configured: dict[str, logging.Logger] = {}
_level = logging.INFO


class LogLevelError(ValueError):
    """Raised when a log level name is not recognised."""

    def __init__(self, level: str) -> None:
        expected = ", ".join(_VALID_LEVELS)
        super().__init__(f"Unknown log level {level!r}; expected one of {expected}.")


def get_logger(name: str) -> logging.Logger:
    """Return a package logger configured for UTC timestamps.

    Args:
        name: Logger name. Names outside the package namespace are prefixed with it.

    Returns:
        A logger with a single stream handler and a consistent UTC format.
    """
    qualified = name if name == _ROOT_NAME or name.startswith(f"{_ROOT_NAME}.") else (
        f"{_ROOT_NAME}.{name}"
    )
    logger = logging.getLogger(qualified)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(_level)
    _configured[qualified] = logger
    return logger


def set_log_level(level: str) -> None:
    """Apply a level name (e.g. ``"DEBUG"``) to every package logger."""
    global _level
    normalized = level.strip().upper()
    if normalized not in _VALID_LEVELS:
        raise LogLevelError(level)
    _level = logging.getLevelNamesMapping()[normalized]
    for logger in _configured.values():
        logger.setLevel(_level)
