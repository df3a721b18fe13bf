"""Request middleware binding ids for logging and timing each request."""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from learnpath.core.context import (
    clear_context,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
TRACE_ID_HEADER = "X-Trace-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"


def trace_id_from_headers(request: Request) -> str | None:
    """``X-Trace-ID`` when present, else the trace id of a W3C ``traceparent``.

    traceparent: {version}-{trace-id}-{parent-id}-{flags}
    """
    explicit = request.headers.get(TRACE_ID_HEADER)
    if explicit:
        return explicit
    parts = request.headers.get("traceparent", "").split("-")
    if len(parts) == 4 and parts[1]:
        return parts[1]
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request/trace/correlation ids and log each request's outcome.

    A caller-supplied ``X-Request-ID`` is reused; the id in effect is always
    echoed back on the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ())

    def _is_logged(self, path: str) -> bool:
        return self.log_requests and not path.startswith(self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_trace_id(trace_id_from_headers(request))
        set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.request_id = request_id

        path = request.url.path
        logged = self._is_logged(path)
        if logged:
            logger.info("request_started", method=request.method, path=path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise
        else:
            if logged:
                emit = logger.warning if response.status_code >= 400 else logger.info
                emit(
                    "request_completed",
                    method=request.method,
                    path=path,
                    status_code=response.status_code,
                    duration_ms=_elapsed_ms(started),
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
