"""fiki FastAPI application entry point.

Wires the content source, markdown renderer, live index and ingestion
coordinator together, runs the first ingestion pass during startup, and
mounts the JSON routes, the theme assets and the page routes.  Loads
configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.
"""

from __future__ import annotations

import argparse
import asyncio
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.pages import site_router
from src.api.routes import APP_VERSION
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.providers.markdown.python_markdown_renderer import PythonMarkdownRenderer
from src.providers.source.factory import build_entry_source
from src.services.ingestion.coordinator import IngestionCoordinator
from src.services.ingestion.live_index import LiveIndex
from src.utils.errors import IngestionError
from src.utils.logging import configure_logging, get_logger
from src.web import THEME_DIR

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def _build_all(config: dict[str, Any]) -> dict[str, Any]:
    """Construct every long-lived component.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    live_index = LiveIndex()
    coordinator = IngestionCoordinator(
        source=build_entry_source(config["source"]),
        renderer=PythonMarkdownRenderer(extensions=config["markdown"]["extensions"]),
        live_index=live_index,
    )
    return {
        "live_index": live_index,
        "coordinator": coordinator,
        "site_title": config["site"]["title"],
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    The first ingestion pass runs when the application starts (lifespan),
    not here, so importing this module never touches the network.
    """
    app_settings = app_settings or Settings()
    config = load_config(app_settings.config_path, settings=app_settings)

    configure_logging(
        log_level=config["logging"]["level"],
        json_output=config["logging"]["json"],
    )

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Build components and publish the first index set before serving."""
        components = _build_all(config)
        for key, value in components.items():
            setattr(application.state, key, value)

        coordinator: IngestionCoordinator = components["coordinator"]
        _logger.info(
            "app_startup",
            version=APP_VERSION,
            environment=app_settings.app_env,
            source=coordinator.source_name,
            renderer=coordinator.renderer_name,
        )

        try:
            index_set = await asyncio.to_thread(coordinator.run_pass)
        except IngestionError as exc:
            # Nothing to serve without a first snapshot.
            _logger.error("initial_ingestion_failed", source=coordinator.source_name, error=str(exc))
            raise

        _logger.info(
            "app_ready",
            pages=index_set.page_count,
            topics=list(index_set.topic_names),
        )

        yield

        coordinator.abandon()
        _logger.info("app_shutdown")

    application = FastAPI(
        title="fiki",
        version=APP_VERSION,
        description="A small markdown wiki served from a GitHub tarball or a local directory.",
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)

    # -- JSON routes, theme assets, then the catch-all page route --
    application.include_router(api_router)
    application.mount("/theme", StaticFiles(directory=str(THEME_DIR)), name="theme")
    application.include_router(site_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m src.main",
        description="Serve the wiki over HTTP.",
    )
    parser.add_argument(
        "--local",
        default=None,
        help="Serve from this directory instead of the repository tarball",
    )
    parser.add_argument("--host", default=None, help="Bind address (default: APP_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: APP_PORT)")
    return parser.parse_args()


if __name__ == "__main__":
    args = _parse_args()
    overrides: dict[str, Any] = {}
    if args.local:
        overrides["wiki_local_dir"] = args.local
    if args.host:
        overrides["app_host"] = args.host
    if args.port:
        overrides["app_port"] = args.port

    serve_settings = Settings().model_copy(update=overrides)
    uvicorn.run(
        create_app(serve_settings),
        host=serve_settings.app_host,
        port=serve_settings.app_port,
    )
