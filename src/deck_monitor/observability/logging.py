"""Centralized logging setup for deck-monitor."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional


class JsonFormatter(logging.Formatter):
    """Logging formatter that outputs one JSON object per line.

    Structured values travel in the record's `extra_fields` attribute (see
    `fields`) and are merged into the top level of the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record as a JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": record.name,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = getattr(record, "extra_fields", None)
        if isinstance(extra, dict):
            for key, value in extra.items():
                log_entry.setdefault(key, value)

        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None, stream=None):
    """Initializes the logging system.

    Args:
        level: Optional log level override. Defaults to LOG_LEVEL env var or INFO.
        stream: Output stream. Defaults to stderr so stdout stays clean for
            command output.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger()
    logger.setLevel(log_level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())

    # Remove existing handlers to avoid duplicates
    for h in logger.handlers[:]:
        logger.removeHandler(h)

    logger.addHandler(handler)


def fields(**values: Any) -> dict[str, Any]:
    """Builds the `extra` argument for a structured log call.

    Example:
        logger.info("Detected changes", extra=fields(change_count=3))
    """
    return {"extra_fields": values}


def get_logger(name: str) -> logging.Logger:
    """Retrieves a logger with the given name.

    Args:
        name: The name of the logger (typically __name__).

    Returns:
        A logging.Logger instance.
    """
    return logging.getLogger(name)
