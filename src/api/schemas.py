"""Pydantic response schemas for the fiki JSON endpoints.

The HTML pages are rendered from templates; these models only describe the
small JSON surface (health, ingestion status, refresh acknowledgment,
errors).  Convention: response schemas end with "Response".
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.ingestion import IngestionPhase, IngestionReport


class ErrorResponse(BaseModel):
    """Structured error body returned by ErrorHandlingMiddleware."""

    error: str
    detail: str
    source: str | None = None


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str = Field(description='"ok" once an index is live, "starting" before')
    version: str
    source: str
    renderer: str
    generation: int = Field(ge=0, description="Number of index sets published so far")
    pages: int = Field(default=0, ge=0)


class IngestionStatusResponse(BaseModel):
    """Coordinator phase and the report of the most recent pass."""

    phase: IngestionPhase
    running: bool
    source: str
    generation: int = Field(ge=0)
    live_pass_id: str | None = None
    last_report: IngestionReport | None = None


class RefreshResponse(BaseModel):
    """Acknowledgment sent by the refresh webhook before the pass runs."""

    status: str = "accepted"
    queued: bool = Field(description="False when a pass was already running and this one was dropped")
    message: str
