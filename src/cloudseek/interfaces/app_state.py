"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from cloudseek.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from cloudseek.application.use_cases import HotSearchService, SearchUseCase
    from cloudseek.domain.ports import HotSearchStorePort
    from cloudseek.infrastructure.cache import MemoryCache
    from cloudseek.infrastructure.channels import TelegramChannelSearcher
    from cloudseek.infrastructure.metrics import MetricsCollector
    from cloudseek.infrastructure.plugins import PluginManager


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: MemoryCache | None
    channel_searcher: TelegramChannelSearcher
    hot_search_store: HotSearchStorePort

    # Plugin registry
    plugins: PluginManager

    # Application services
    search_uc: SearchUseCase
    hot_search: HotSearchService

    # Metrics (in-memory counters, created by create_app)
    metrics: MetricsCollector
