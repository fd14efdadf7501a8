"""
Logging setup and structured status events.

Outputs JSON-formatted logs for Loki ingestion by default, or plain text
for console use. Only the outcome of each check is logged as an event;
step details go to module loggers at debug level.

Logged events:
- monitoring.status_checked

Usage:
    from monitoringstatus.log import configure_logging, emit_status_event

    configure_logging(level="info", fmt="json")
    emit_status_event(status, namespace="openshift-monitoring")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from monitoringstatus.status import DegradationStatus

ROOT_LOGGER = "monitoringstatus"

_event_logger = logging.getLogger("monitoringstatus.events")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; fields passed via ``extra={"event_fields": ...}`` are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "event_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "info",
    fmt: str = "json",
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Install a single handler on the package logger.

    Logs go to stdout unless another stream is given. Calling it again
    replaces the handler, so the CLI can reconfigure freely.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def emit_status_event(status: "DegradationStatus", namespace: str) -> None:
    """Log the outcome of one status check."""
    fields = {
        "event": "monitoring.status_checked",
        "namespace": namespace,
        "degraded": status.degraded,
        "reason": status.reason,
    }
    if status.error is not None:
        fields["error"] = str(status.error)

    if status.degraded:
        _event_logger.warning(
            f"monitoring stack degraded: {status.reason}", extra={"event_fields": fields}
        )
    else:
        _event_logger.info("monitoring stack healthy", extra={"event_fields": fields})
