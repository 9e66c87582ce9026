"""FastAPI middleware for API rate limiting."""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cloudseek.domain.entities import AppError, ErrorCode
from cloudseek.interfaces.api.errors import error_response

log = structlog.get_logger(__name__)

# How many dispatch cycles between full sweeps of stale client entries.
_GC_INTERVAL = 256


@dataclass
class _Window:
    started_at: float
    count: int = 0


def client_ip(request: Request) -> str:
    """First hop of ``X-Forwarded-For``, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window rate limiter per client IP.

    Each client gets ``max_requests`` per ``window_ms``; the window starts
    with the client's first request. Requests whose path starts with one
    of ``skip_paths`` are never counted. Windows that have ended are
    swept every few hundred requests to bound memory.

    Args:
        app: ASGI application.
        window_ms: Window length in milliseconds.
        max_requests: Requests allowed per client per window.
        skip_paths: Path prefixes exempt from limiting.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        app: object,
        window_ms: int = 60_000,
        max_requests: int = 60,
        skip_paths: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._window_s = window_ms / 1000.0
        self._max = max_requests
        self._skip = tuple(skip_paths)
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._dispatch_count = 0

    def _sweep(self, now: float) -> None:
        stale = [
            ip for ip, w in self._windows.items() if now - w.started_at >= self._window_s
        ]
        for ip in stale:
            del self._windows[ip]

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._skip and request.url.path.startswith(self._skip):
            return await call_next(request)

        ip = client_ip(request)
        now = self._clock()

        window = self._windows.get(ip)
        if window is None or now - window.started_at >= self._window_s:
            window = _Window(started_at=now)
            self._windows[ip] = window

        reset_in = max(0.0, window.started_at + self._window_s - now)
        reset_seconds = max(1, math.ceil(reset_in))

        if window.count >= self._max:
            log.warning(
                "rate_limit_exceeded",
                client_ip=ip,
                limit=self._max,
                retry_after_seconds=reset_seconds,
            )
            response = error_response(
                AppError.too_many_requests(
                    ErrorCode.RATE_LIMIT_EXCEEDED,
                    "Too many requests, please try again later",
                    {"retry_after_seconds": reset_seconds},
                )
            )
            response.headers["X-RateLimit-Limit"] = str(self._max)
            response.headers["X-RateLimit-Remaining"] = "0"
            response.headers["X-RateLimit-Reset"] = str(reset_seconds)
            return response

        window.count += 1

        # Periodic GC: evict clients whose window has ended
        self._dispatch_count += 1
        if self._dispatch_count >= _GC_INTERVAL:
            self._dispatch_count = 0
            self._sweep(now)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self._max)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self._max - window.count))
        response.headers["X-RateLimit-Reset"] = str(reset_seconds)
        return response
