"""Custom logging handlers for vsplit.

Provides JSONFormatter for structured log output.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came from `extra=`
_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

# Injected by WorkerContextFilter and emitted explicitly
_WORKER_ATTRS: tuple[str, ...] = ("worker_id", "file_id", "file_path")


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Keys: timestamp (ISO-8601 UTC), level, message, logger (unless root),
    context (extra attributes and worker context), exception (if any).
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        record_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: dict[str, Any] = {
            "timestamp": record_time.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if record.name and record.name != "root":
            log_entry["logger"] = record.name

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
            and key not in _WORKER_ATTRS
            and key != "worker_tag"
            and not key.startswith("_")
        }
        for key in _WORKER_ATTRS:
            value = getattr(record, key, None)
            if value:
                context[key] = value

        if context:
            log_entry["context"] = context

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)
