"""Hot search term tracking."""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterable

import structlog

from cloudseek.domain.entities.hot_search import (
    HotSearchItem,
    HotSearchStats,
    rank_key,
)
from cloudseek.domain.ports.hot_search_store import HotSearchStorePort

log = structlog.get_logger(__name__)

DEFAULT_MAX_ENTRIES = 30
STATS_TOP_N = 10


def _compile_forbidden(terms: Iterable[str]) -> re.Pattern[str] | None:
    escaped = [re.escape(t) for t in terms if t]
    if not escaped:
        return None
    return re.compile("|".join(escaped), re.IGNORECASE)


class HotSearchService:
    """Keeps a bounded, ranked list of recently searched terms.

    Items are ranked by score (number of searches) and then by how
    recently they were searched. Only the top ``max_entries`` survive.
    """

    def __init__(
        self,
        store: HotSearchStorePort,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        forbidden_terms: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._max_entries = max_entries
        self._forbidden = _compile_forbidden(forbidden_terms)
        self._clock = clock

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def is_forbidden(self, term: str) -> bool:
        return self._forbidden is not None and bool(self._forbidden.search(term))

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def record_search(self, term: str) -> HotSearchItem | None:
        """Count one search for *term*. Blank and forbidden terms are ignored."""
        term = (term or "").strip()
        if not term:
            return None
        if self.is_forbidden(term):
            log.info("hot_search_term_forbidden", term=term)
            return None

        now = self._now_ms()
        item = await self._store.get(term)
        if item is None:
            item = HotSearchItem(term=term, score=1, last_searched=now, created_at=now)
        else:
            item.score += 1
            item.last_searched = now
        await self._store.put(item)
        log.debug("hot_search_recorded", term=term, score=item.score)

        await self._trim()
        return item

    async def _trim(self) -> None:
        items = await self._store.list_all()
        if len(items) <= self._max_entries:
            return
        items.sort(key=rank_key)
        dropped = items[self._max_entries :]
        for item in dropped:
            await self._store.delete(item.term)
        log.debug("hot_search_trimmed", dropped=len(dropped))

    async def get_hot_searches(self, limit: int = DEFAULT_MAX_ENTRIES) -> list[HotSearchItem]:
        items = await self._store.list_all()
        items.sort(key=rank_key)
        return items[: max(0, min(limit, self._max_entries))]

    async def delete(self, term: str) -> bool:
        deleted = await self._store.delete(term)
        log.info("hot_search_deleted", term=term, deleted=deleted)
        return deleted

    async def clear(self) -> None:
        await self._store.clear()
        log.warning("hot_searches_cleared", backend=self._store.backend)

    async def get_stats(self) -> HotSearchStats:
        items = await self._store.list_all()
        items.sort(key=rank_key)
        return HotSearchStats(total=len(items), top_terms=items[:STATS_TOP_N])
