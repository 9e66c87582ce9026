"""Port for searching a single message channel."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from cloudseek.domain.entities.search import SearchResult


class ChannelSearcherPort(Protocol):
    """Async interface for keyword search inside one named channel."""

    async def search_channel(
        self,
        channel: str,
        keyword: str,
        ext: Mapping[str, Any] | None = None,
    ) -> list[SearchResult]: ...
