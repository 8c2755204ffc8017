"""Logging helpers.

Records carry their context in ``extra`` (``event``, ``slug``, ``article_id``
and so on). The JSON formatter emits every such key; the plain formatter
appends the few that identify an article so a terminal run stays readable.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HANDLER_NAME = "zendesk_sync"

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
_PLAIN_CONTEXT = ("event", "slug", "article_id", "status")
_NOISY_LOGGERS = ("urllib3",)


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, timestamps in UTC."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(record_extras(record))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Classic text lines followed by ``key=value`` article context."""

    def __init__(self) -> None:
        super().__init__(PLAIN_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        context = " ".join(f"{key}={extras[key]}" for key in _PLAIN_CONTEXT if key in extras)
        return f"{line} [{context}]" if context else line


def configure_logging(*, level: int = logging.INFO, structured: bool = True) -> logging.Handler:
    """Install (or reconfigure) the application handler on the root logger."""

    root = logging.getLogger()
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    handler = next((item for item in root.handlers if item.get_name() == HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        root.addHandler(handler)
    handler.setFormatter(JsonFormatter() if structured else PlainFormatter())
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["JsonFormatter", "PlainFormatter", "configure_logging", "get_logger", "record_extras"]
