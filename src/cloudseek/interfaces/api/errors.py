"""Error conversion and the JSON response envelope."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cloudseek.domain.entities.errors import AppError, ErrorCode

log = structlog.get_logger(__name__)

SUCCESS_MESSAGE = "success"


def ok(data: Any = None, *, message: str = SUCCESS_MESSAGE) -> dict[str, Any]:
    """Success envelope: ``{"code": 0, "message": ..., "data": ...}``."""
    return {"code": 0, "message": message, "data": data}


def handle_error(exc: BaseException) -> AppError:
    """Convert *exc* to an AppError, logging it when it deserves a log line.

    Unknown exceptions become 500 responses that keep the original
    ``code`` / ``status_code`` attributes when the exception carries them.
    """
    if isinstance(exc, AppError):
        if exc.should_log:
            log.error(
                "app_error",
                code=exc.code,
                status_code=exc.status_code,
                details=exc.details,
                error_message=exc.message,
                exc_info=exc,
            )
        return exc

    code = getattr(exc, "code", None)
    status_code = getattr(exc, "status_code", None)
    log.error(
        "unexpected_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        exc_info=exc,
    )
    return AppError(
        code if isinstance(code, str) and code else ErrorCode.UNKNOWN_ERROR,
        str(exc) or "Unknown error",
        status_code if isinstance(status_code, int) and status_code >= 400 else 500,
        should_log=True,
    )


def error_response(error: AppError) -> JSONResponse:
    headers: dict[str, str] = {}
    retry_after = (
        error.details.get("retry_after_seconds")
        if isinstance(error.details, dict)
        else None
    )
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response(),
        headers=headers or None,
    )


def _record_error(request: Request, error: AppError) -> None:
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is not None:
        metrics.record_error(error.code, error.message)


def register_exception_handlers(app: FastAPI) -> None:
    """Map AppError, validation failures and unexpected exceptions to envelopes."""

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        error = handle_error(exc)
        _record_error(request, error)
        return error_response(error)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = AppError.bad_request(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request parameters",
            details=[
                {
                    "field": ".".join(str(p) for p in err.get("loc", ())),
                    "message": err.get("msg", ""),
                }
                for err in exc.errors()
            ],
        )
        _record_error(request, error)
        return error_response(error)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = ErrorCode.NOT_FOUND if exc.status_code == 404 else ErrorCode.UNKNOWN_ERROR
        error = AppError(code, str(exc.detail), exc.status_code, should_log=False)
        return error_response(error)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        error = handle_error(exc)
        _record_error(request, error)
        return error_response(error)
