"""fiki HTTP layer: wiki pages, refresh webhook, JSON status routes, middleware."""

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.pages import site_router
from src.api.routes import router
from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    IngestionStatusResponse,
    RefreshResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "router",
    "site_router",
    "ErrorResponse",
    "HealthResponse",
    "IngestionStatusResponse",
    "RefreshResponse",
]
