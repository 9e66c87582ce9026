"""Shared test fixtures for CloudSeek test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Mapping
from unittest.mock import AsyncMock, MagicMock

import pytest

from cloudseek.domain.entities import Link, SearchResult
from cloudseek.domain.plugins import BaseSearchPlugin
from cloudseek.infrastructure.config.schema import SearchConfig

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


def _make_result(
    unique_id: str,
    links: list[tuple[str, str]] | None = None,
    *,
    channel: str = "",
    title: str | None = None,
    content: str = "",
    datetime: str = "2025-01-01T12:00:00Z",
) -> SearchResult:
    return SearchResult(
        unique_id=unique_id,
        channel=channel,
        datetime=datetime,
        title=title if title is not None else f"Result {unique_id}",
        content=content,
        links=tuple(Link(type=t, url=u) for t, u in links or []),
    )


@pytest.fixture()
def make_result() -> Callable[..., SearchResult]:
    """Factory: ``make_result("id", [("quark", "https://...")], channel=...)``."""
    return _make_result


@pytest.fixture()
def search_result() -> SearchResult:
    """Minimal valid SearchResult with one quark link."""
    return _make_result("r1", [("quark", "https://pan.quark.cn/s/abc")])


# ---------------------------------------------------------------------------
# Plugin fixtures
# ---------------------------------------------------------------------------


class FakePlugin(BaseSearchPlugin):
    """Scriptable plugin: fixed results, optional delay or error."""

    def __init__(
        self,
        name: str = "fake",
        priority: int = 100,
        results: list[SearchResult] | None = None,
        *,
        delay: float = 0.0,
        error: BaseException | None = None,
        skip_filter: bool = False,
    ) -> None:
        super().__init__(name=name, priority=priority)
        self.results = list(results or [])
        self.delay = delay
        self.error = error
        self.skip_filter = skip_filter
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.active = 0
        self.max_active = 0

    def skip_service_filter(self) -> bool:
        return self.skip_filter

    async def search(
        self, keyword: str, ext: Mapping[str, Any] | None = None
    ) -> list[SearchResult]:
        self.calls.append((keyword, dict(ext or {})))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return list(self.results)
        finally:
            self.active -= 1


@pytest.fixture()
def fake_plugin_cls() -> type[FakePlugin]:
    return FakePlugin


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def search_config() -> SearchConfig:
    """Search defaults with a short per-source timeout."""
    return SearchConfig(default_concurrency=5, plugin_timeout_ms=500)


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_channel_searcher() -> AsyncMock:
    """Mock ChannelSearcherPort returning no results."""
    searcher = AsyncMock()
    searcher.search_channel = AsyncMock(return_value=[])
    searcher.aclose = AsyncMock()
    return searcher


@pytest.fixture()
def mock_metrics() -> MagicMock:
    """Mock metrics recorder (synchronous methods)."""
    return MagicMock()
