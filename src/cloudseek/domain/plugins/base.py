"""Domain protocol for search plugins."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from cloudseek.domain.entities.search import SearchResult


@runtime_checkable
class SearchPluginProtocol(Protocol):
    """
    Protocol for search plugins.

    A plugin module must export a module-level variable named `plugin` that:
    - has `name: str` and `priority: int` attributes
      (lower priority runs and merges first)
    - implements: async def search(keyword, ext) -> list[SearchResult]
    - accepts the current cache key / keyword before each search
    """

    name: str
    priority: int

    async def search(
        self, keyword: str, ext: Mapping[str, Any] | None = None
    ) -> list[SearchResult]: ...

    def set_main_cache_key(self, key: str) -> None: ...

    def set_current_keyword(self, keyword: str) -> None: ...

    def skip_service_filter(self) -> bool: ...


class BaseSearchPlugin:
    """Default implementation of the non-search parts of the protocol.

    Subclasses set ``name``/``priority`` (or pass them to ``__init__``)
    and override ``search()``.
    """

    name: str = ""
    priority: int = 100

    def __init__(self, name: str | None = None, priority: int | None = None) -> None:
        if name is not None:
            self.name = name
        if priority is not None:
            self.priority = priority
        self.main_cache_key: str = ""
        self.current_keyword: str = ""

    def set_main_cache_key(self, key: str) -> None:
        self.main_cache_key = key

    def set_current_keyword(self, keyword: str) -> None:
        self.current_keyword = keyword

    def skip_service_filter(self) -> bool:
        return False

    async def search(
        self, keyword: str, ext: Mapping[str, Any] | None = None
    ) -> list[SearchResult]:
        return []
