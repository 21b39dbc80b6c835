"""Structured logging configuration.

Uses standard library logging with a JSON formatter. `RunLogger` is the
pipeline's logger collaborator: it tags every message with the run id.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import UTC, datetime
from typing import Any

_RESERVED_LOG_RECORD_ATTRS: set[str] = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    """A minimal JSON formatter for logging records."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    """Configure root logging with structured JSON output."""

    root = logging.getLogger()

    # Remove any existing handlers to avoid duplicate logs when re-configuring.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())

    # Keep third-party loggers reasonably quiet unless explicitly configured.
    for name in ("openai", "httpx", "urllib3"):
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))


class RunLogger:
    """Pipeline logger collaborator bound to one run.

    Messages go to stdlib logging with `run_id` attached and are also kept in
    `events` so they can be stored with the run record.
    """

    def __init__(self, run_id: str, name: str = "ux_process_orchestrator.run") -> None:
        self.run_id = run_id
        self._logger = logging.getLogger(name)
        self._lock = threading.Lock()
        self.events: list[dict[str, str]] = []

    def log(self, level: str, message: str) -> None:
        levelno = _LEVELS.get(level.lower(), logging.INFO)
        self._logger.log(levelno, message, extra={"run_id": self.run_id})
        with self._lock:
            self.events.append(
                {
                    "timestamp": datetime.now(tz=UTC).isoformat(),
                    "level": logging.getLevelName(levelno).lower(),
                    "message": message,
                }
            )
