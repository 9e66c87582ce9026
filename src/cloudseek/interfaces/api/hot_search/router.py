"""Hot search term endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from cloudseek.domain.entities import AppError, ErrorCode
from cloudseek.interfaces.api.errors import error_response, ok
from cloudseek.interfaces.api.search.router import _read_body, validation_details
from cloudseek.interfaces.api.search.schemas import HotSearchRecordModel
from cloudseek.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["hot-search"])


@router.get("/hot-searches")
async def list_hot_searches(
    request: Request,
    limit: int = Query(default=30, ge=1, le=100, description="Max terms returned."),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    items = await state.hot_search.get_hot_searches(limit)
    return JSONResponse(
        content=ok({"hot_searches": [item.to_dict() for item in items]})
    )


@router.post("/hot-searches")
async def record_hot_search(request: Request) -> JSONResponse:
    """Count one search for ``{"term": ...}``."""
    state = cast(AppState, request.app.state)
    try:
        body = await _read_body(request)
        record = HotSearchRecordModel.model_validate(body)
    except AppError as exc:
        return error_response(exc)
    except ValidationError as exc:
        return error_response(
            AppError.bad_request(
                ErrorCode.VALIDATION_ERROR,
                "Invalid hot search term",
                validation_details(exc),
            )
        )

    item = await state.hot_search.record_search(record.term)
    return JSONResponse(content=ok(item.to_dict() if item is not None else None))


@router.delete("/hot-searches")
async def clear_hot_searches(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    await state.hot_search.clear()
    return JSONResponse(content=ok({"success": True}, message="hot searches cleared"))


@router.delete("/hot-searches/{term}")
async def delete_hot_search(request: Request, term: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    deleted = await state.hot_search.delete(term)
    if not deleted:
        return error_response(
            AppError.not_found(ErrorCode.NOT_FOUND, f"Hot search term '{term}' not found")
        )
    return JSONResponse(content=ok({"success": True, "term": term}))


@router.get("/hot-search-stats")
async def hot_search_stats(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    stats = await state.hot_search.get_stats()
    return JSONResponse(
        content=ok(
            {
                "stats": stats.to_dict(),
                "mode": state.hot_search_store.backend,
                "max_entries": state.hot_search.max_entries,
            }
        )
    )
