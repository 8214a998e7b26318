"""Logging setup: one JSON object per line, correlated by request and checkout.

Every record gets ``request_id`` and, inside a checkout attempt, the audit
``session_id``. Call sites add order context through ``extra``:

    logger.warning("Order validation violation", extra={"user_id": ..., "severity": "critical"})
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .correlation import current_audit_session, current_request_id

# Keys copied from ``extra`` into the JSON document when present
CONTEXT_FIELDS = (
    "session_id",
    "user_id",
    "order_number",
    "event_type",
    "severity",
    "status_code",
    "duration_ms",
    "alert",
)

PLAIN_FORMAT = "%(asctime)s %(levelname)-7s [%(request_id)s %(session_id)s] %(name)s: %(message)s"


class CorrelationFilter(logging.Filter):
    """Stamp request and audit session ids on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        if getattr(record, "session_id", None) is None:
            record.session_id = current_audit_session() or "-"
        return True


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        document = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }

        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None and value != "-":
                document[key] = value

        if record.exc_info:
            document["error"] = repr(record.exc_info[1])
            document["traceback"] = self.formatException(record.exc_info)

        return json.dumps(document, default=str)


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Replace the root handlers with a single stdout handler.

    Args:
        level: Log level name
        json_format: JSON lines when True, human-readable lines otherwise
    """
    numeric_level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT))
    handler.addFilter(CorrelationFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpx", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
