"""Structured JSON-lines logger."""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime
from typing import Any, TextIO

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
}


class JsonLogger:
    """Writes one JSON object per record, with key/value fields attached."""

    def __init__(self, stream: TextIO | None = None, level: int = logging.INFO) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._level = level
        self._lock = threading.Lock()

    def _emit(self, level: int, msg: str, fields: dict[str, Any]) -> None:
        if level < self._level:
            return
        record: dict[str, Any] = {
            "level": _LEVEL_NAMES[level],
            "time": datetime.now().astimezone().isoformat(timespec="milliseconds"),
            "msg": msg,
        }
        record.update(fields)
        line = json.dumps(record, ensure_ascii=False, default=str)
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.INFO, msg, kwargs)

    def warn(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.ERROR, msg, kwargs)


def new_logger() -> JsonLogger:
    """Return the application logger: JSON to stdout at info level."""
    return JsonLogger(sys.stdout, logging.INFO)