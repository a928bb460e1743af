"""Logging configuration."""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import settings

logger = logging.getLogger("app")

_HANDLER_NAME = "app.telemetry"

# Attributes present on every LogRecord; anything else came in through ``extra``
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure root logging as JSON lines or plain text."""
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    handler.set_name(_HANDLER_NAME)
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Dict messages (``logger.info({"event": ...})``) are merged into the
    output object; any other message is stored under ``message``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        else:
            payload["message"] = record.getMessage()

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def log_timing(operation: str, duration_ms: float, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Log operation timing metrics."""
    logger.info({"event": "timing", "operation": operation, "duration_ms": round(duration_ms, 2), **(metadata or {})})


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log error with context."""
    logger.error({"event": "error", "error_type": type(error).__name__, "error": str(error), **(context or {})})
