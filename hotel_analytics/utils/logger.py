"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from hotel_analytics.utils.config import get_settings


PACKAGE_LOGGER_NAME = "hotel_analytics"
_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    The root handler stays at WARNING so chatty third-party libraries do not
    flood the console; the package namespace gets the configured level.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(level=logging.WARNING, format=_LOG_FORMAT, stream=sys.stdout)
    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(resolved_level)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    if name != PACKAGE_LOGGER_NAME and not name.startswith(PACKAGE_LOGGER_NAME + "."):
        name = f"{PACKAGE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
