"""
Logging configuration.

- text: human-readable lines for development
- json: one JSON object per line for log aggregation
- Log level: controlled via the LOG_LEVEL setting
"""

import json
import logging
import sys
from datetime import datetime, timezone

from ticketdesk.core.config import Settings


# Extra attributes copied into JSON records when a handler passed them
_EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "duration_ms",
    "user_id",
    "ticket_id",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production / log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        request_id = getattr(record, "request_id", None)
        rid = f" [{request_id}]" if request_id else ""
        base = f"{ts} {record.levelname:<8} {record.name}{rid}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(settings: Settings) -> None:
    """
    Install a single stream handler on the root logger.

    WHY: Called from the app factory so every module logger
    (logging.getLogger(__name__)) shares one format and level.
    Calling it again replaces the handler instead of stacking a second one.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_ticketdesk", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler._ticketdesk = True  # type: ignore[attr-defined]
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ReadableFormatter())

    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())

    # SQL echo is noisy; only surface it in debug mode
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
