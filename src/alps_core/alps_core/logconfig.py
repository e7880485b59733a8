# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Logging setup shared by the CLI and the HTTP server.

Request-scoped values live in context variables populated by
``alps_server.logging_middleware.RequestContextMiddleware`` and are copied
onto every log record by :class:`RequestContextFilter`.
"""

import json
import logging
import logging.handlers
from contextvars import ContextVar
from typing import List, Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_MAX_LOG_FILE_BYTES = 10 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 5

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
request_endpoint_var: ContextVar[str] = ContextVar("request_endpoint", default="")
request_duration_var: ContextVar[str] = ContextVar("request_duration", default="")

# Handlers installed by configure_logging, replaced on reconfiguration.
_installed_handlers: List[logging.Handler] = []


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object with the request context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", ""),
            "endpoint": getattr(record, "endpoint", ""),
            "duration_ms": getattr(record, "duration_ms", ""),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class RequestContextFilter(logging.Filter):
    """Inject request_id, endpoint and duration_ms into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.endpoint = request_endpoint_var.get()
        record.duration_ms = request_duration_var.get()
        return True


def configure_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    json_logs: bool = False,
    max_log_file_bytes: Optional[int] = None,
    log_backup_count: Optional[int] = None,
):
    """Configure the root logger with a stream handler and an optional rotating file."""
    formatter = JsonFormatter() if json_logs else logging.Formatter(LOG_FORMAT)
    context_filter = RequestContextFilter()

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                logfile,
                maxBytes=max_log_file_bytes
                if max_log_file_bytes is not None
                else DEFAULT_MAX_LOG_FILE_BYTES,
                backupCount=log_backup_count
                if log_backup_count is not None
                else DEFAULT_LOG_BACKUP_COUNT,
            )
        )

    root = logging.getLogger()
    while _installed_handlers:
        old = _installed_handlers.pop()
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
        _installed_handlers.append(handler)
    root.setLevel(level.upper())
