"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from cloudseek.infrastructure.config import AppConfig
from cloudseek.infrastructure.metrics import MetricsCollector
from cloudseek.interfaces.api.errors import ok, register_exception_handlers
from cloudseek.interfaces.api.middleware import RateLimitMiddleware
from cloudseek.interfaces.app_state import AppState
from cloudseek.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app. Configuration only, no resource initialization.

    Resources (cache, plugins, channel searcher, stores) are created in
    lifespan().
    """
    app = FastAPI(
        title="CloudSeek",
        description="Cloud-drive link search aggregator",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config
    app.state.metrics = MetricsCollector()

    # API rate limiting (per-IP fixed window)
    if config.rate_limit.enabled:
        app.add_middleware(
            RateLimitMiddleware,
            window_ms=config.rate_limit.window_ms,
            max_requests=config.rate_limit.max_requests,
            skip_paths=config.rate_limit.skip_paths,
        )

    register_exception_handlers(app)

    from cloudseek.interfaces.api.hot_search.router import router as hot_search_router
    from cloudseek.interfaces.api.search.router import router as search_router
    from cloudseek.interfaces.api.stats.router import router as stats_router

    app.include_router(search_router, prefix="/api")
    app.include_router(hot_search_router, prefix="/api")
    app.include_router(stats_router, prefix="/api")

    @app.get("/api/health")
    async def health() -> dict[str, Any]:
        """Liveness probe with the registered plugins and default channels."""
        state = app.state
        plugins = getattr(state, "plugins", None)
        names = plugins.names() if plugins is not None else []
        return ok(
            {
                "status": "ok",
                "plugins_enabled": bool(names),
                "plugin_count": len(names),
                "plugins": names,
                "channels": list(config.search.default_channels),
            }
        )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter_ns()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ns = time.perf_counter_ns() - start
            status_code = getattr(locals().get("response", None), "status_code", 500)
            app.state.metrics.record_api_request(status_code, duration_ns)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ns / 1_000_000, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
