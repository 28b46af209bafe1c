"""FastAPI JSON routes: health and ingestion status.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                     Method  Description
# ───────────────────────────────────────────────────────────────────
# /api/v1/health               GET     Liveness + live index generation
# /api/v1/ingestion/status     GET     Coordinator phase + last pass report
#
# The wiki pages and the refresh webhook live in src/api/pages.py.
# Dependencies are read from app.state (populated in main.py's lifespan).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.schemas import HealthResponse, IngestionStatusResponse
from src.services.ingestion.coordinator import IngestionCoordinator
from src.services.ingestion.live_index import LiveIndex

APP_VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1")


def _get_live_index(request: Request) -> LiveIndex:
    return request.app.state.live_index


def _get_coordinator(request: Request) -> IngestionCoordinator:
    return request.app.state.coordinator


LiveIndexDep = Annotated[LiveIndex, Depends(_get_live_index)]
CoordinatorDep = Annotated[IngestionCoordinator, Depends(_get_coordinator)]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(live_index: LiveIndexDep, coordinator: CoordinatorDep) -> HealthResponse:
    """Return ``ok`` once an index set is live, ``starting`` before that."""
    index_set = live_index.current()
    return HealthResponse(
        status="ok" if index_set is not None else "starting",
        version=APP_VERSION,
        source=coordinator.source_name,
        renderer=coordinator.renderer_name,
        generation=live_index.generation,
        pages=index_set.page_count if index_set is not None else 0,
    )


@router.get(
    "/ingestion/status",
    response_model=IngestionStatusResponse,
    summary="Current ingestion phase and last pass report",
)
async def ingestion_status(
    live_index: LiveIndexDep,
    coordinator: CoordinatorDep,
) -> IngestionStatusResponse:
    index_set = live_index.current()
    return IngestionStatusResponse(
        phase=coordinator.phase,
        running=coordinator.is_running,
        source=coordinator.source_name,
        generation=live_index.generation,
        live_pass_id=index_set.pass_id if index_set is not None else None,
        last_report=coordinator.last_report,
    )
