"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from cloudseek.application.use_cases import HotSearchService, SearchUseCase
from cloudseek.infrastructure.cache import MemoryCache
from cloudseek.infrastructure.channels import TelegramChannelSearcher
from cloudseek.infrastructure.hot_search import create_hot_search_store
from cloudseek.infrastructure.metrics import MetricsCollector
from cloudseek.infrastructure.plugins import PluginManager, load_plugins_from_dir
from cloudseek.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Result cache (optional)
        2. Plugin manager
        3. Channel searcher
        4. Hot-search store + service
        5. Search use case (uses everything above)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 0) Metrics collector (normally created by create_app for the middleware)
    if getattr(state, "metrics", None) is None:
        state.metrics = MetricsCollector()

    # 1) Result cache
    if config.cache.enabled:
        state.cache = MemoryCache(
            max_size=config.cache.max_size,
            max_memory_bytes=config.cache.max_memory_bytes,
            cleanup_interval_ms=config.cache.cleanup_interval_ms,
            memory_threshold=config.cache.memory_threshold,
        )
        log.info(
            "cache_initialized",
            max_size=config.cache.max_size,
            ttl_minutes=config.cache.ttl_minutes,
        )
    else:
        state.cache = None
        log.info("cache_disabled")

    # 2) Plugin manager
    state.plugins = PluginManager(load_plugins_from_dir(config.plugin_dir))
    log.info("plugins_registered", count=state.plugins.size, plugins=state.plugins.names())

    # 3) Channel searcher
    state.channel_searcher = TelegramChannelSearcher(
        base_url=config.telegram_base_url,
        timeout_seconds=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )
    log.info("channel_searcher_initialized", base_url=state.channel_searcher.base_url)

    # 4) Hot-search store + service
    state.hot_search_store = create_hot_search_store(
        config.hot_search.backend,
        directory=str(config.hot_search.directory),
    )
    state.hot_search = HotSearchService(
        state.hot_search_store,
        max_entries=config.hot_search.max_entries,
        forbidden_terms=config.hot_search.forbidden_terms,
    )
    log.info("hot_search_initialized", backend=state.hot_search_store.backend)

    # 5) Search use case
    state.search_uc = SearchUseCase(
        plugins=state.plugins,
        config=config.search,
        channel_searcher=state.channel_searcher,
        cache=state.cache,
        cache_ttl_ms=config.cache.ttl_ms,
        metrics=state.metrics,
    )
    log.info(
        "search_use_case_initialized",
        default_concurrency=config.search.default_concurrency,
        plugin_timeout_ms=config.search.plugin_timeout_ms,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.channel_searcher.aclose()
        log.info("channel_searcher_closed")

        await state.hot_search_store.aclose()
        log.info("hot_search_store_closed")

        if state.cache is not None:
            state.cache.clear()
            log.info("cache_cleared")

        log.info("app_shutdown_complete")
