"""Logging configuration for the service.

Every record is written to stdout as one JSON object per line, tagged with the
service name and version so the ingress controller's log pipeline can tell
the default backend apart from the proxy itself.

setup_logging() is idempotent: calling it again won't duplicate handlers.
The level comes from Settings.log_level (LOG_LEVEL / --log-level).
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging import Handler, LogRecord
from typing import Any

from . import __version__

SERVICE_NAME = "ingress-nginx-errors"

# Header-derived values (X-Code, X-Format, paths) end up in extras; keep lines bounded.
MAX_FIELD_CHARS = 256

# Attributes every LogRecord carries; anything else came in via `extra`.
_RESERVED = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "color_message",
    }
)


def _clip(value: Any) -> Any:
    if not isinstance(value, (str, int, float, bool, type(None))):
        value = str(value)
    if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
        return f"{value[:MAX_FIELD_CHARS]}...(+{len(value) - MAX_FIELD_CHARS} chars)"
    return value


class JsonFormatter(logging.Formatter):
    """JSON-line formatter.

    Emits ts, level, logger, service, version and message, followed by any
    structured extras given via `logger.info("event.name", extra={...})`.
    Extras never overwrite those core keys, and long string values are clipped.
    """

    def __init__(self, service: str = SERVICE_NAME, version: str = __version__) -> None:
        super().__init__()
        self.service = service
        self.version = version

    def format(self, record: LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service,
            "version": self.version,
            "message": _clip(record.getMessage()),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED or key in payload:
                continue
            payload[key] = _clip(value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def _make_stream_handler(level: int) -> Handler:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root and uvicorn loggers for JSON output.

    Idempotent: only attaches handlers if none are present.
    """
    root = logging.getLogger()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if root.handlers:  # Prevent double configuration under reload / tests
        return

    root.setLevel(level)
    root.addHandler(_make_stream_handler(level))

    # uvicorn installs its own handlers unless log_config=None; route them through root.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.propagate = True
        for h in list(lg.handlers):
            lg.removeHandler(h)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger.

    Usage: logger = get_logger(__name__)
    """
    return logging.getLogger(name if name else __name__)
