"""
LevelScope — Global Exception Handlers

Every error leaves the API in one JSON shape:

    {error, status_code, detail, error_type, request_id[, errors]}

Analysis input errors (bad anchor, degenerate levels, broken bar sequences,
short history in strict mode) become 422 responses named after the
LevelScopeError subclass. The handler stores the error type on
``request.state`` for the request logger's outcome line.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

import structlog

from levelscope.errors import LevelScopeError

log = structlog.get_logger(__name__)


def error_response(
    request: Request,
    status_code: int,
    detail,
    error_type: str,
    **extra,
) -> JSONResponse:
    """Build the shared error body and record *error_type* on the request."""
    request.state.error_type = error_type
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "status_code": status_code,
            "detail": detail,
            "error_type": error_type,
            "request_id": getattr(request.state, "request_id", None),
            **extra,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(LevelScopeError)
    async def analysis_error_handler(request: Request, exc: LevelScopeError):
        # Attributes such as high/low, name/value or count/required go to the
        # log only: a degenerate level can be inf, which JSON cannot carry.
        log.warning(
            "analysis.rejected",
            error_type=type(exc).__name__,
            error=str(exc),
            **{k: v for k, v in vars(exc).items() if not k.startswith("_")},
        )
        return error_response(request, 422, str(exc), type(exc).__name__)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(request, exc.status_code, exc.detail, "HTTPException")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bars or request body → 422 with one entry per field."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        log.warning("request.invalid", fields=[e["field"] for e in errors])
        return error_response(
            request, 422, "Validation error", "RequestValidationError", errors=errors,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            request_id=getattr(request.state, "request_id", None),
            exc_info=exc,
        )
        return error_response(request, 500, "Internal server error", "InternalError")
