from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from graphsync.clients.neo4j import check_neo4j_health
from graphsync.common.exceptions import register_exception_handlers
from graphsync.common.middleware import install_request_logging
from graphsync.common.schemas import ApiResponse
from graphsync.config import get_settings
from graphsync.indexing.manager import get_sync_manager, shutdown_sync_manager
from graphsync.reindex.router import router as reindex_router
from graphsync.reindex.service import ReindexService

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: build the sync manager, release clients at exit."""
    manager = get_sync_manager()
    if not manager.enabled:
        logging.getLogger(__name__).warning(
            "indexing disabled: %s", manager.startup_error or "no index specification configured"
        )
    yield
    shutdown_sync_manager()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

register_exception_handlers(app, debug=settings.debug)
install_request_logging(app)

app.include_router(reindex_router)


@app.get("/health", response_model=ApiResponse)
def health() -> ApiResponse:
    indexing = ReindexService().status()
    graph_ok, graph_message = check_neo4j_health()
    return ApiResponse.ok(
        {
            "status": "ok" if graph_ok else "degraded",
            "indexing": indexing.model_dump(by_alias=True),
            "graph": {"healthy": graph_ok, "message": graph_message},
        }
    )
