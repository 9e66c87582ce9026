"""Diskcache hot-search store - SQLite-based, survives restarts."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from pathlib import Path
from typing import Any

import structlog
from diskcache import Cache as DiskCache

from cloudseek.domain.entities.hot_search import HotSearchItem

log = structlog.get_logger(__name__)

_KEY_PREFIX = "hot:"


def _to_item(raw: Any) -> HotSearchItem | None:
    if not isinstance(raw, dict):
        return None
    try:
        return HotSearchItem(**raw)
    except TypeError:
        return None


class DiskcacheHotSearchStore:
    """Async wrapper for diskcache.Cache (sync-only library).

    - Uses `asyncio.to_thread` for I/O (no blocking of the event loop).
    - Opens the SQLite cache lazily on first access.
    - Items are stored as plain dicts under ``hot:<term>`` keys.

    Args:
        directory: SQLite DB path (default: `./data/hot_search`).
    """

    backend = "diskcache"

    def __init__(self, directory: str | Path = "./data/hot_search") -> None:
        self.directory = Path(directory)
        self._cache: DiskCache | None = None
        self._lock = asyncio.Lock()

        log.info("hot_search_store_init", backend=self.backend, directory=str(self.directory))

    async def _open(self) -> DiskCache:
        async with self._lock:
            if self._cache is None:
                self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
                log.info("diskcache_opened", path=str(self.directory))
            return self._cache

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_closed", directory=str(self.directory))

    # --- HotSearchStorePort implementation ---
    async def get(self, term: str) -> HotSearchItem | None:
        cache = await self._open()
        raw = await asyncio.to_thread(cache.get, _KEY_PREFIX + term, default=None)
        return _to_item(raw)

    async def put(self, item: HotSearchItem) -> None:
        cache = await self._open()
        await asyncio.to_thread(cache.set, _KEY_PREFIX + item.term, asdict(item))

    async def delete(self, term: str) -> bool:
        cache = await self._open()
        return bool(await asyncio.to_thread(cache.delete, _KEY_PREFIX + term))

    async def list_all(self) -> list[HotSearchItem]:
        cache = await self._open()

        def _collect() -> list[HotSearchItem]:
            items: list[HotSearchItem] = []
            for key in list(cache.iterkeys()):
                if not isinstance(key, str) or not key.startswith(_KEY_PREFIX):
                    continue
                item = _to_item(cache.get(key, default=None))
                if item is not None:
                    items.append(item)
            return items

        return await asyncio.to_thread(_collect)

    async def clear(self) -> None:
        cache = await self._open()
        await asyncio.to_thread(cache.clear)
