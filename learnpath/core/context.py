"""Per-request values that every log line should carry.

The middleware fills these at the start of a request and clears them at the
end; ``get_context`` is read by the structlog chain. The acting user is set
once the bearer token has been resolved.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


_request_id: ContextVar[str] = ContextVar("request_id", default="")
_user_id: ContextVar[str | None] = ContextVar("user_id", default=None)
_trace_id: ContextVar[str | None] = ContextVar("trace_id", default=None)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_OPTIONAL_VARS = (_user_id, _trace_id, _correlation_id)


def set_request_id(request_id: str | None = None) -> str:
    """Bind the request id, minting a UUID4 when the caller sent none."""
    value = request_id or uuid4().hex
    _request_id.set(value)
    return value


def get_request_id() -> str:
    return _request_id.get()


def set_user_id(user_id: UUID | str | None) -> None:
    _user_id.set(None if user_id is None else str(user_id))


def get_user_id() -> str | None:
    return _user_id.get()


def set_trace_id(trace_id: str | None) -> None:
    _trace_id.set(trace_id)


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


def get_context() -> dict[str, Any]:
    """Bound values keyed by variable name; unset ones are left out."""
    context: dict[str, Any] = {}
    for var in (_request_id, *_OPTIONAL_VARS):
        value = var.get()
        if value:
            context[var.name] = value
    return context


def clear_context() -> None:
    _request_id.set("")
    for var in _OPTIONAL_VARS:
        var.set(None)
