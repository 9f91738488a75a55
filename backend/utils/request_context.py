"""
Request-scoped context helpers.

A single ContextVar `request_context` holds a dict with keys like:
  - request_id
  - client_ip
  - prompt_type / prompt_version (set by routes that render a stored prompt)

The logging filter and the outgoing LLM client both read from it.
"""
from typing import Dict, Any
import contextvars

request_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("request_context", default={})


def get_request_context() -> Dict[str, Any]:
    return request_context.get()


def set_request_context(ctx: Dict[str, Any]):
    # shallow copy so one request never mutates another's dict
    request_context.set(dict(ctx))


def update_request_context(**values: Any) -> Dict[str, Any]:
    """Merge non-None values into the current context and return the result."""
    merged = dict(get_request_context() or {})
    merged.update({k: v for k, v in values.items() if v is not None})
    request_context.set(merged)
    return merged
