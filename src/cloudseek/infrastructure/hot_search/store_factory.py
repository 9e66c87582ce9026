"""Hot-search store factory - creates the store based on config."""

from __future__ import annotations

from typing import Literal

import structlog

from cloudseek.domain.ports.hot_search_store import HotSearchStorePort
from cloudseek.infrastructure.hot_search.diskcache_store import (
    DiskcacheHotSearchStore,
)
from cloudseek.infrastructure.hot_search.memory_store import MemoryHotSearchStore

log = structlog.get_logger(__name__)

HotSearchBackend = Literal["memory", "diskcache"]


def create_hot_search_store(
    backend: HotSearchBackend = "memory",
    *,
    directory: str = "./data/hot_search",
) -> HotSearchStorePort:
    """Create a hot-search store for *backend*.

    Args:
        backend: "memory" (process lifetime) or "diskcache" (SQLite).
        directory: Diskcache path, ignored for the memory backend.

    Raises:
        ValueError: If `backend` is unknown.
    """
    if backend == "memory":
        log.info("hot_search_store_create", backend=backend)
        return MemoryHotSearchStore()
    elif backend == "diskcache":
        log.info("hot_search_store_create", backend=backend, directory=directory)
        return DiskcacheHotSearchStore(directory=directory)
    else:
        raise ValueError(
            f"Unknown hot search backend: {backend!r}. Must be 'memory' or 'diskcache'."
        )
