"""Logging setup driven by ``WHATSAPP_LOG_LEVEL``."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

DIM = "\033[2m"
CYAN = "\033[36m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def resolve_level(name: str) -> int:
    """Map a level name (``info``, ``debug``, ``warn``, ``error``) to a logging level."""
    try:
        return LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level {name!r}; expected one of info, debug, warn, error"
        ) from None


class ColorFormatter(logging.Formatter):
    """Colours each record by level for interactive terminals."""

    COLORS = {
        logging.DEBUG: DIM,
        logging.INFO: CYAN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelno)
        if color is None:
            return message
        return f"{color}{message}{RESET}"


def configure_logging(level: str = "info", stream: TextIO | None = None) -> None:
    """Install a single root handler at *level*, replacing any existing ones."""
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    formatter_cls = ColorFormatter if isatty is not None and isatty() else logging.Formatter
    handler.setFormatter(formatter_cls(LOG_FORMAT))

    logging.basicConfig(level=resolve_level(level), handlers=[handler], force=True)
