"""
Structured JSON logging for hocrbatch.

Modules log an event name as the message and attach context with `extra=`
(batch id, file name, elapsed time). The formatter turns each record into
one JSON line carrying those fields plus the emitting thread, so output from
the OCR worker pool can be told apart.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Any

LOGGER_NAME = "hocrbatch"

# Attributes every LogRecord carries; anything else came in through `extra=`.
STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """
    Collect the fields a caller attached to a record with `extra=`.

    Values that cannot be JSON-encoded are replaced by their repr().
    """
    fields: dict[str, Any] = {}
    for key, value in vars(record).items():
        if key in STANDARD_ATTRS or key.startswith("_"):
            continue
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            value = repr(value)
        fields[key] = value
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per record: event, level, logger, thread, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "thread": record.threadName,
        }
        payload.update(extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", *, stream: IO[str] | None = None) -> logging.Logger:
    """
    Route the package logger to a single JSON handler.

    Calling it again replaces the handler instead of adding another one.
    Records do not propagate to the root logger.

    Parameters:
        level: Level name, case-insensitive; unknown names fall back to INFO
        stream: Where to write (stderr by default)

    Returns:
        The configured "hocrbatch" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger
