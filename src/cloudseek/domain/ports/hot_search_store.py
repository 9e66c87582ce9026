"""Port for hot-search term persistence."""

from __future__ import annotations

from typing import Protocol

from cloudseek.domain.entities.hot_search import HotSearchItem


class HotSearchStorePort(Protocol):
    """Async key-value store of hot-search items, keyed by term.

    Implementations:
      - MemoryHotSearchStore (process memory)
      - DiskcacheHotSearchStore (SQLite-based, survives restarts)
    """

    backend: str

    async def get(self, term: str) -> HotSearchItem | None: ...

    async def put(self, item: HotSearchItem) -> None: ...

    async def delete(self, term: str) -> bool: ...

    async def list_all(self) -> list[HotSearchItem]: ...

    async def clear(self) -> None: ...

    async def aclose(self) -> None: ...
