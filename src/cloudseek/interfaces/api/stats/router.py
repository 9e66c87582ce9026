"""Runtime metrics endpoints."""

from __future__ import annotations

import hmac
from datetime import datetime, timezone
from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cloudseek.domain.entities import AppError, ErrorCode
from cloudseek.interfaces.api.errors import error_response, ok
from cloudseek.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stats"])

_TOKEN_HEADER = "X-Admin-Token"


def _token_ok(state: AppState, supplied: str | None) -> bool:
    expected = state.config.admin_token
    if not expected:
        return True
    return supplied is not None and hmac.compare_digest(supplied, expected)


def _unauthorized() -> JSONResponse:
    return error_response(
        AppError.unauthorized(ErrorCode.UNAUTHORIZED, "A valid admin token is required")
    )


@router.get("/metrics")
async def metrics(request: Request) -> JSONResponse:
    """Return in-memory runtime metrics plus cache statistics.

    Guarded by ``admin_token`` when configured (``?token=`` or
    ``X-Admin-Token`` header).
    """
    state = cast(AppState, request.app.state)
    token = request.query_params.get("token") or request.headers.get(_TOKEN_HEADER)
    if not _token_ok(state, token):
        return _unauthorized()

    data: dict[str, Any] = state.metrics.snapshot()

    cache = getattr(state, "cache", None)
    data["cache"] = cache.get_stats().to_dict() if cache is not None else None

    plugins = getattr(state, "plugins", None)
    if plugins is not None:
        data["registered_plugins"] = plugins.names()

    return JSONResponse(content=ok(data))


@router.post("/metrics/reset")
async def reset_metrics(request: Request) -> JSONResponse:
    """Drop recorded metrics. Token via JSON body ``{"token": ...}`` or header."""
    state = cast(AppState, request.app.state)
    token = request.headers.get(_TOKEN_HEADER)
    if token is None:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("token"), str):
            token = body["token"]
    if not _token_ok(state, token):
        return _unauthorized()

    state.metrics.reset()
    log.info("metrics_reset")
    return JSONResponse(
        content=ok(
            {"timestamp": datetime.now(timezone.utc).isoformat()},
            message="metrics reset",
        )
    )
