"""HTTP error envelope: every failure is answered with an `ApiResponse.fail` body."""
from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from graphsync.common.middleware import get_request_id
from graphsync.common.schemas import ApiResponse
from graphsync.indexing.errors import GraphSyncError, IndexingDisabledError, ReindexFailed, SpecParseError

logger = logging.getLogger(__name__)

# (error class, http status, envelope code); first match wins.
SYNC_ERROR_STATUS: tuple[tuple[type[GraphSyncError], int, int], ...] = (
    (IndexingDisabledError, HTTP_409_CONFLICT, 40900),
    (SpecParseError, HTTP_400_BAD_REQUEST, 40001),
    (ReindexFailed, HTTP_502_BAD_GATEWAY, 50200),
)


def sync_error_status(exc: GraphSyncError) -> tuple[int, int]:
    for cls, status, code in SYNC_ERROR_STATUS:
        if isinstance(exc, cls):
            return status, code
    return HTTP_500_INTERNAL_SERVER_ERROR, 50000


def _request_id(request: Request) -> str | None:
    return get_request_id() or getattr(request.state, "request_id", None)


def _log_failure(level: int, event: str, request: Request, *, exc_info: bool = False, **fields: Any) -> None:
    extra = "".join(f" {key}=%s" for key in fields)
    logger.log(
        level,
        f"{event} request_id=%s method=%s path=%s{extra}",
        _request_id(request),
        request.method,
        request.url.path,
        *fields.values(),
        exc_info=exc_info,
    )


def _fail(status_code: int, code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.fail(code=code, message=message, data=data).model_dump(),
    )


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    @app.exception_handler(GraphSyncError)
    async def sync_error_handler(request: Request, exc: GraphSyncError) -> JSONResponse:
        status, code = sync_error_status(exc)
        _log_failure(logging.WARNING, "sync_error", request, status=status, type=type(exc).__name__, message=exc)
        cause = exc.__cause__
        details = {"cause": f"{type(cause).__name__}: {cause}"} if debug and cause is not None else None
        return _fail(status, code, str(exc), details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        _log_failure(logging.WARNING, "validation_error", request, errors=errors)
        return _fail(422, 42200, "Validation Error", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "HTTP Error" if exc.detail is None else str(exc.detail)
        _log_failure(logging.WARNING, "http_exception", request, status=exc.status_code, message=message)
        return _fail(exc.status_code, exc.status_code, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        _log_failure(logging.ERROR, "unhandled_exception", request, exc_info=True)
        details: dict[str, Any] | None = None
        if debug:
            details = {
                "requestId": _request_id(request),
                "type": type(exc).__name__,
                "message": str(exc),
                "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            }
        return _fail(HTTP_500_INTERNAL_SERVER_ERROR, 50000, "Internal Server Error", details)
