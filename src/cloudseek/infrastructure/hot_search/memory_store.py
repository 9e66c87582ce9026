"""In-process hot-search store."""

from __future__ import annotations

from dataclasses import replace

from cloudseek.domain.entities.hot_search import HotSearchItem


class MemoryHotSearchStore:
    """Dict-backed store. Items are copied on the way in and out."""

    backend = "memory"

    def __init__(self) -> None:
        self._items: dict[str, HotSearchItem] = {}

    async def get(self, term: str) -> HotSearchItem | None:
        item = self._items.get(term)
        return replace(item) if item is not None else None

    async def put(self, item: HotSearchItem) -> None:
        self._items[item.term] = replace(item)

    async def delete(self, term: str) -> bool:
        return self._items.pop(term, None) is not None

    async def list_all(self) -> list[HotSearchItem]:
        return [replace(item) for item in self._items.values()]

    async def clear(self) -> None:
        self._items.clear()

    async def aclose(self) -> None:
        return None
