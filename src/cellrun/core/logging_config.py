"""Centralized logging configuration for cellrun.

Usage:
    from cellrun.core.logging_config import configure_logging, get_logger

    # Configure once at application startup
    configure_logging(level="DEBUG")

    # Get loggers in modules
    logger = get_logger(__name__)

Environment Variables:
    CELLRUN_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    CELLRUN_LOG_FORMAT: Output format ("text" or "json")
    CELLRUN_LOG_FILE: Optional log file path

Console output goes to the real stderr captured at configure time, so log
lines never end up inside a block's diagnostics.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Literal

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TEXT_FORMAT_WITH_MS = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came in through `extra`
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

_configured = False


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    {
        "timestamp": "2026-01-05T14:30:00.123",
        "level": "DEBUG",
        "logger": "cellrun.core.session",
        "message": "block_complete: segments=2, results=1, consumed=2",
        "extra": {...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


def _formatter(format: str, include_ms: bool) -> logging.Formatter:
    if format == "json":
        return JsonFormatter()
    fmt = TEXT_FORMAT_WITH_MS if include_ms else TEXT_FORMAT
    return logging.Formatter(fmt, datefmt=DATE_FORMAT)


def configure_logging(
    level: str | None = None,
    format: Literal["text", "json"] | None = None,
    file_path: str | None = None,
    include_ms: bool = True,
    force: bool = False,
) -> None:
    """Configure logging for the application.

    Subsequent calls are ignored unless force=True.

    Args:
        level: Log level. Defaults to CELLRUN_LOG_LEVEL or "INFO".
        format: Output format. Defaults to CELLRUN_LOG_FORMAT or "text".
        file_path: Optional file path. Defaults to CELLRUN_LOG_FILE.
        include_ms: Include milliseconds in timestamp.
        force: Force reconfiguration even if already configured.
    """
    global _configured
    if _configured and not force:
        return

    level = level or os.environ.get("CELLRUN_LOG_LEVEL", "INFO")
    format = format or os.environ.get("CELLRUN_LOG_FORMAT", "text")  # type: ignore
    file_path = file_path or os.environ.get("CELLRUN_LOG_FILE")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    formatter = _formatter(format, include_ms)

    console_handler = logging.StreamHandler(sys.__stderr__)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file_path:
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)


def set_level(level: str, logger_name: str | None = None) -> None:
    """Set log level for a specific logger or the root logger."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper()))
