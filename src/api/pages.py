"""Wiki page routes and the refresh webhook.

# ─── SITE ROUTE MAP ───────────────────────────────────────────────────
#
# Endpoint          Method     Description
# ───────────────────────────────────────────────────────────────────
# /_githook         GET, POST  Schedule a refresh pass, acknowledge at once
# /{page_path}      GET        Render a page or a directory listing
#
# site_router must be included LAST in main.py: the catch-all page route
# would otherwise shadow /api/v1/* and the /theme mount.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from src.api.schemas import RefreshResponse
from src.services.ingestion.coordinator import IngestionCoordinator
from src.services.ingestion.live_index import LiveIndex
from src.services.navigation import resolve_page
from src.utils.logging import get_logger
from src.web import TEMPLATES_DIR

logger = get_logger(__name__)

site_router = APIRouter()
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _get_live_index(request: Request) -> LiveIndex:
    return request.app.state.live_index


def _get_coordinator(request: Request) -> IngestionCoordinator:
    return request.app.state.coordinator


LiveIndexDep = Annotated[LiveIndex, Depends(_get_live_index)]
CoordinatorDep = Annotated[IngestionCoordinator, Depends(_get_coordinator)]


@site_router.api_route(
    "/_githook",
    methods=["GET", "POST"],
    response_model=RefreshResponse,
    include_in_schema=False,
)
async def githook(
    background_tasks: BackgroundTasks,
    coordinator: CoordinatorDep,
) -> RefreshResponse:
    """Acknowledge a push notification and refresh the wiki in the background.

    The payload is not inspected: any call means "the source changed".
    """
    if coordinator.is_running:
        logger.info("refresh_request_dropped", source=coordinator.source_name)
        return RefreshResponse(queued=False, message="A refresh is already running")

    background_tasks.add_task(coordinator.refresh)
    logger.info("refresh_request_accepted", source=coordinator.source_name)
    return RefreshResponse(queued=True, message="Refresh scheduled")


@site_router.get("/{page_path:path}", response_class=HTMLResponse, include_in_schema=False)
async def show_page(
    request: Request,
    page_path: str,
    live_index: LiveIndexDep,
) -> HTMLResponse:
    """Render *page_path* inside the site layout.

    The IndexSet is read once so the whole response comes from one pass.
    """
    index_set = live_index.current()
    if index_set is None:
        raise HTTPException(status_code=503, detail="The wiki is still loading")

    view = resolve_page(index_set, page_path)
    if view is None:
        raise HTTPException(status_code=404, detail=f"No page at /{page_path.strip('/')}")

    body = view.html
    if view.is_listing:
        body = templates.get_template("listing.html").render(
            title=view.title,
            path=view.path,
            page=view.html,
            children=view.children,
            topics=index_set.topic_names,
        )

    return templates.TemplateResponse(
        request,
        "base.html",
        {
            "site_title": request.app.state.site_title,
            "title": view.title,
            "page": body,
            "topics": index_set.topic_names,
            "breadcrumb": view.breadcrumb,
            "tree": index_set.tree(),
            "active_path": view.path,
        },
    )
