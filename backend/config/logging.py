"""
Structured JSON logging configuration with request-context injection.

Usage:
    from config.logging import configure_logging
    configure_logging()
"""
import logging
import json
import time
from typing import Any, Dict

from utils.request_context import get_request_context

_CONTEXT_KEYS = ("request_id", "client_ip", "prompt_type", "prompt_version")

_RESERVED_ATTRS = frozenset((
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
    "message",
    "taskName",
) + _CONTEXT_KEYS)


class RequestContextFilter(logging.Filter):
    """Logging filter that copies request-scoped keys onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_request_context() or {}
        for key in _CONTEXT_KEYS:
            if getattr(record, key, None) is None:
                setattr(record, key, ctx.get(key))
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": int(time.time()),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
        }

        for k in _CONTEXT_KEYS:
            val = getattr(record, k, None)
            if val is not None:
                payload[k] = val

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # anything passed through logger.*(extra=...)
        extras = {}
        for key, val in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps({key: val})
                extras[key] = val
            except (TypeError, ValueError):
                extras[key] = repr(val)
        if extras:
            payload["extra"] = extras

        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: int = logging.INFO) -> None:
    """
    Set up the root logger with JSONFormatter and RequestContextFilter.
    Safe to call more than once.
    """
    root = logging.getLogger()
    root.setLevel(level)

    handler = next((h for h in root.handlers if isinstance(h.formatter, JSONFormatter)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)

    # filters on the root logger do not see records propagated from children,
    # so the context filter sits on the handler
    if not any(isinstance(f, RequestContextFilter) for f in handler.filters):
        handler.addFilter(RequestContextFilter())
