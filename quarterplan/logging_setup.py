"""Logging wiring.

``configure_logging`` sets up the ``quarterplan`` logger used for the
per-request structured line. ``SupportLogHandler`` captures WARN+ records
with the request id (if any) into an in-memory deque served by
``/api/support/logs`` for quick troubleshooting without log aggregation.
"""

from __future__ import annotations

import collections
import logging
import time

from flask import g, has_request_context, request

LOG_BUFFER: collections.deque[dict] = collections.deque(maxlen=500)
LOGGER_NAME = "quarterplan"


class SupportLogHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        if has_request_context():
            rid = getattr(g, "request_id", "-")
            path = request.path
        else:
            rid = "-"
            path = "-"
        LOG_BUFFER.append(
            {
                "ts": time.time(),
                "level": record.levelname,
                "logger": record.name,
                "msg": self.format(record),
                "request_id": rid,
                "path": path,
            }
        )


def configure_logging(level: str = "INFO") -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, SupportLogHandler) for h in log.handlers):
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        log.addHandler(h)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))
    return log


def install_support_log_handler() -> None:
    root = logging.getLogger()
    # Avoid duplicate attachment if reloaded
    if any(isinstance(h, SupportLogHandler) for h in root.handlers):
        return
    h = SupportLogHandler(level=logging.WARNING)
    h.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(h)


def recent_records(limit: int = 100) -> list[dict]:
    items = list(LOG_BUFFER)
    return items[-limit:] if limit > 0 else []


__all__ = [
    "LOG_BUFFER",
    "LOGGER_NAME",
    "SupportLogHandler",
    "configure_logging",
    "install_support_log_handler",
    "recent_records",
]
