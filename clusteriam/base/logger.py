"""
Structured logging for reconcile runs.

Every record is one JSON line.  Records emitted while a lifecycle
operation runs carry the cluster identifier and the operation name
(``create``, ``update``, ``delete``, ...), so a single reconcile pass can
be followed through dispatch, polling and read-back in a log aggregator.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

# Record attributes copied into the JSON payload when present
CONTEXT_FIELDS = ("request_id", "cluster", "operation")


class StructuredFormatter(logging.Formatter):
    """Render a record and its reconcile context as a JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key))
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[1]:
            payload["exception"] = str(record.exc_info[1])
        return json.dumps(payload)


class ClusterIamLogger:
    """Logger used by the dispatcher, waiter and controller.

    Attaches a JSON stream handler on first use of the named logger;
    an application that configured its own handlers keeps them.
    """

    def __init__(self, name: str = "clusteriam") -> None:
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def log_operation(
        self,
        level: int,
        message: str,
        *,
        cluster: str | None = None,
        operation: str | None = None,
        request_id: str | None = None,
        exc_info: bool = False,
    ) -> None:
        """Log *message* tagged with the cluster and lifecycle operation.

        A short random ``request_id`` is generated when none is given.
        """
        context = {
            "cluster": cluster,
            "operation": operation,
            "request_id": request_id or uuid.uuid4().hex[:12],
        }
        self.logger.log(level, message, extra=context, exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.ERROR, message, **kwargs)


# Shared by every reconcile component
ci_logger = ClusterIamLogger()
