# Core infrastructure
from learnpath.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_correlation_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from learnpath.core.exceptions import LearnPathError
from learnpath.core.logging import configure_structlog, get_logger


__all__ = [
    "LearnPathError",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_user_id",
    "set_correlation_id",
    "set_request_id",
    "set_trace_id",
    "set_user_id",
]
