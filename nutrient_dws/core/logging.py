"""
Logging helpers for applications using the client.

The package only logs through loggers under ``nutrient_dws``. setup_logging()
is opt-in and configures that logger alone; the root logger and its handlers
belong to the application.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from nutrient_dws.core.config import settings
from nutrient_dws.core.error_handling import request_id_var

PACKAGE_LOGGER = "nutrient_dws"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class RequestIDFilter(logging.Filter):
    """Copy the current workflow request id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or ""
        return True


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Carries timestamp, level, logger name and message, plus the request id
    when one is set and any ``extra_fields`` attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", "")
        if settings.LOG_INCLUDE_REQUEST_ID and request_id:
            entry["request_id"] = request_id

        entry.update(getattr(record, "extra_fields", {}))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ClientLogHandler(logging.StreamHandler):
    """Stream handler installed by setup_logging()."""


def _build_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT.lower() == "json":
        return JSONFormatter()
    if settings.LOG_INCLUDE_REQUEST_ID:
        return logging.Formatter(TEXT_FORMAT + " - request_id=%(request_id)s")
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Send the client's logs to a stream, as text or JSON per settings.

    Only the ``nutrient_dws`` logger is configured. A handler from an earlier
    call is replaced; handlers added by the application stay in place, and
    records still propagate to the root logger.

    Args:
        stream: Destination stream (defaults to sys.stdout)

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    for existing in package_logger.handlers[:]:
        if isinstance(existing, ClientLogHandler):
            package_logger.removeHandler(existing)

    handler = ClientLogHandler(stream or sys.stdout)
    handler.setFormatter(_build_formatter())
    if settings.LOG_INCLUDE_REQUEST_ID:
        handler.addFilter(RequestIDFilter())

    package_logger.addHandler(handler)
    return package_logger
