from __future__ import annotations

import json
from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from cloudseek.domain.entities import AppError, ErrorCode
from cloudseek.interfaces.api.errors import error_response, handle_error, ok
from cloudseek.interfaces.api.search.schemas import SearchRequestModel
from cloudseek.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["search"])


def validation_details(exc: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(p) for p in err["loc"]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]


def _parse_request(params: dict[str, Any]) -> SearchRequestModel:
    try:
        return SearchRequestModel.model_validate(params)
    except ValidationError as e:
        raise AppError.bad_request(
            ErrorCode.VALIDATION_ERROR,
            "Invalid search parameters",
            validation_details(e),
        ) from e


async def _read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AppError.bad_request(
            ErrorCode.INVALID_PARAMETER, "Request body must be valid JSON"
        ) from e
    if not isinstance(body, dict):
        raise AppError.bad_request(
            ErrorCode.INVALID_PARAMETER, "Request body must be a JSON object"
        )
    return body


async def _search(request: Request, params: dict[str, Any]) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        req = _parse_request(params)
        response = await state.search_uc.execute(req.to_profile())
    except Exception as exc:
        error = handle_error(exc)
        metrics = getattr(state, "metrics", None)
        if metrics is not None:
            metrics.record_error(error.code, error.message)
        return error_response(error)

    return JSONResponse(content=ok(response.to_dict()))


@router.get("/search")
async def search_get(request: Request) -> JSONResponse:
    """Search with query parameters (``kw``, ``res``, ``src``, ...)."""
    return await _search(request, dict(request.query_params))


@router.post("/search")
async def search_post(request: Request) -> JSONResponse:
    """Search with a JSON body. Body fields override query parameters."""
    params: dict[str, Any] = dict(request.query_params)
    try:
        body = await _read_body(request)
    except AppError as exc:
        return error_response(exc)
    params.update({k: v for k, v in body.items() if v is not None})
    return await _search(request, params)
