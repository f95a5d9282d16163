"""
Logging configuration for the Weather Tracker API.

This module provides logging configuration with proper formatting, log levels,
and handlers. The output format is chosen once at startup from ``LOG_FORMAT``;
every formatter in ``FORMATTERS`` is a drop-in ``logging.Formatter``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from weather_tracker.config import Settings

# Attributes present on every LogRecord; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _text_formatter(debug: bool) -> logging.Formatter:
    if debug:
        # Detailed format for development
        return logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    # Structured format for production (easier to parse)
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def _json_formatter(debug: bool) -> logging.Formatter:
    return JSONFormatter()


FORMATTERS: Dict[str, Callable[[bool], logging.Formatter]] = {
    "text": _text_formatter,
    "json": _json_formatter,
}


def build_formatter(log_format: str, debug: bool = False) -> logging.Formatter:
    """
    Build the formatter registered under ``log_format``.

    Raises:
        ValueError: If no formatter is registered under that name
    """
    try:
        factory = FORMATTERS[log_format.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown LOG_FORMAT '{log_format}'. Expected one of: {', '.join(sorted(FORMATTERS))}"
        )
    return factory(debug)


def setup_logging(settings: "Settings") -> logging.Logger:
    """
    Configure application logging.

    Sets up a console handler and, when ``LOG_DIR`` is configured, rotating
    file handlers for all logs and for errors only.
    """
    log_format = build_formatter(settings.LOG_FORMAT, settings.DEBUG)

    # Configure root logger
    logger = logging.getLogger()
    logger.setLevel(settings.LOG_LEVEL.upper())

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_format)
    logger.addHandler(console_handler)

    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_dir / "weather_tracker.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(log_format)
        logger.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            log_dir / "weather_tracker_errors.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(log_format)
        logger.addHandler(error_handler)

    # Reduce noise from some verbose libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info("=" * 60)
    logger.info("Weather Tracker API - Logging initialized")
    logger.info(f"Log Level: {settings.LOG_LEVEL}")
    logger.info(f"Log Format: {settings.LOG_FORMAT}")
    logger.info("=" * 60)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
