"""
LevelScope — Request Logger Middleware

One structured outcome line per analysis request. The request id is taken
from an incoming X-Request-ID header when the presentation client sends one,
otherwise generated, and is bound to the structlog context so engine events
(levels.computed, pipeline.complete, ...) carry it too.

Routes record the submitted bar count on ``request.state.bar_count`` and the
error handlers record ``request.state.error_type``; both are attached to the
outcome line.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

log = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_SKIP_PATHS = frozenset({"/health"})


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Bind request context and log status, bars, error type and latency."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            endpoint=f"{request.method} {request.url.path}",
        )

        start = time.perf_counter()
        response = await call_next(request)
        fields = request_outcome(request, response.status_code, time.perf_counter() - start)

        if response.status_code >= 500:
            log.error("request.failed", **fields)
        elif response.status_code >= 400:
            log.warning("request.rejected", **fields)
        else:
            log.info("request.complete", **fields)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def request_outcome(request: Request, status: int, elapsed: float) -> dict:
    """Fields of the outcome line; bars and error_type only when recorded."""
    fields = {
        "path": request.url.path,
        "status": status,
        "latency_ms": round(elapsed * 1000, 1),
    }
    bar_count = getattr(request.state, "bar_count", None)
    if bar_count is not None:
        fields["bars"] = bar_count
    error_type = getattr(request.state, "error_type", None)
    if error_type is not None:
        fields["error_type"] = error_type
    return fields
