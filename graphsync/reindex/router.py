"""FastAPI router for re-index jobs and sync configuration."""
from __future__ import annotations

from fastapi import APIRouter

from graphsync.common.schemas import ApiResponse
from graphsync.reindex.schemas import ReindexOptions, ReindexRequest
from graphsync.reindex.service import ReindexService

router = APIRouter(prefix="/api/index", tags=["index"])


@router.post("", response_model=ApiResponse)
def index_labels(request: ReindexRequest) -> ApiResponse:
    """Index every node of the given labels.

    Returns numberOfBatches (bulk requests sent) and numberOfIndexedDocument
    (nodes visited, including those resolving to a delete).
    """
    result = ReindexService().index(
        request.labels,
        batch_size=request.batch_size,
        asynchronous=request.asynchronous,
    )
    return ApiResponse.ok(result.model_dump(by_alias=True))


@router.post("/all", response_model=ApiResponse)
def index_all(request: ReindexOptions | None = None) -> ApiResponse:
    """Index every node of every indexed label present in the graph."""
    options = request or ReindexOptions()
    result = ReindexService().index_all(batch_size=options.batch_size, asynchronous=options.asynchronous)
    return ApiResponse.ok(result.model_dump(by_alias=True))


@router.get("/status", response_model=ApiResponse)
def status() -> ApiResponse:
    return ApiResponse.ok(ReindexService().status().model_dump(by_alias=True))


@router.post("/reload", response_model=ApiResponse)
def reload() -> ApiResponse:
    """Reload the index specification; an invalid spec leaves the current one active."""
    return ApiResponse.ok(ReindexService().reload().model_dump(by_alias=True))
