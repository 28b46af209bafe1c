"""API middleware -- request logging and error handling.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)    # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)   # added 2nd → outermost
#
#   Request flow:   Client → RequestLogging → ErrorHandling → route
#   Response flow:  Client ← RequestLogging ← ErrorHandling ← route
#
# RequestLoggingMiddleware binds the live index generation into the
# structlog context for the whole request, so every event logged while
# serving (including ErrorHandling's) says which snapshot was read.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import FikiError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Served by StaticFiles; logged at debug to keep page views readable.
_ASSET_PREFIX = "/theme/"


def _live_generation(request: Request) -> int | None:
    """Generation of the snapshot this request will read, if the app is wired."""
    live_index = getattr(request.app.state, "live_index", None)
    return live_index.generation if live_index is not None else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status, duration and generation."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        start = time.perf_counter()
        response: Response | None = None

        with structlog.contextvars.bound_contextvars(generation=_live_generation(request)):
            try:
                response = await call_next(request)
                return response
            finally:
                status_code = response.status_code if response else 500
                log = _logger.debug if path.startswith(_ASSET_PREFIX) else _logger.info
                log(
                    "http_request",
                    method=request.method,
                    path=path,
                    status=status_code,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``FikiError`` subclasses escaping a route into JSON errors.

    The body names the error class, its message and the content source it
    came from.  Other exceptions fall through to FastAPI's default 500
    handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except FikiError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                source=exc.source_name,
                path=request.url.path,
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
                source=exc.source_name,
            )
            return JSONResponse(status_code=500, content=body.model_dump())
