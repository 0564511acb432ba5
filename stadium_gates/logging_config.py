"""Logging helpers for stadium_gates.

The package is silent by default (NullHandler). Diagnostics such as balancing
moves, gate picks and worker ticks are logged at DEBUG; simulation phases at
INFO. The visitor-facing conversation is printed, not logged.

Environment variables:
    STADIUM_GATES_LOGGING: log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOGGER_NAME = "stadium_gates"
ENV_LEVEL = "STADIUM_GATES_LOGGING"


def _get_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def enable_console_logging(level: str | int = "INFO", format: str = DEFAULT_FORMAT) -> logging.StreamHandler:
    """Log to stderr so the kiosk conversation on stdout stays readable."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    logger.setLevel(_get_level(level))
    handler = logging.StreamHandler()
    handler.setLevel(_get_level(level))
    handler.setFormatter(logging.Formatter(format, DEFAULT_DATE_FORMAT))
    logger.addHandler(handler)
    return handler


def configure_from_env() -> logging.StreamHandler | None:
    level = os.environ.get(ENV_LEVEL)
    if not level:
        return None
    return enable_console_logging(level)
