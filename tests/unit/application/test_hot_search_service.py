"""Tests for HotSearchService."""

from __future__ import annotations

import pytest

from cloudseek.application.use_cases import HotSearchService
from cloudseek.infrastructure.hot_search import MemoryHotSearchStore


class _Clock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float = 1.0) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def service(clock: _Clock) -> HotSearchService:
    return HotSearchService(
        MemoryHotSearchStore(),
        max_entries=3,
        forbidden_terms=["赌博", "spam"],
        clock=clock,
    )


class TestRecordSearch:
    async def test_new_term(self, service: HotSearchService, clock: _Clock) -> None:
        item = await service.record_search("  movie ")
        assert item is not None
        assert item.term == "movie"
        assert item.score == 1
        assert item.created_at == item.last_searched == int(clock.now * 1000)

    async def test_repeat_increments_score(
        self, service: HotSearchService, clock: _Clock
    ) -> None:
        first = await service.record_search("movie")
        clock.tick(5)
        second = await service.record_search("movie")
        assert second is not None and first is not None
        assert second.score == 2
        assert second.last_searched > first.created_at
        assert second.created_at == first.created_at

    @pytest.mark.parametrize("term", ["", "   ", "online 赌博", "SPAM movie"])
    async def test_blank_and_forbidden_terms_are_ignored(
        self, service: HotSearchService, term: str
    ) -> None:
        assert await service.record_search(term) is None
        assert await service.get_hot_searches() == []

    async def test_trims_to_max_entries(
        self, service: HotSearchService, clock: _Clock
    ) -> None:
        await service.record_search("a")
        await service.record_search("a")
        clock.tick()
        await service.record_search("b")
        clock.tick()
        await service.record_search("c")
        clock.tick()
        await service.record_search("d")

        terms = [i.term for i in await service.get_hot_searches()]
        # "a" wins on score; among score 1 the most recent survive
        assert terms == ["a", "d", "c"]


class TestQueries:
    async def test_limit(self, service: HotSearchService, clock: _Clock) -> None:
        for term in ("a", "b", "c"):
            await service.record_search(term)
            clock.tick()
        assert [i.term for i in await service.get_hot_searches(2)] == ["c", "b"]

    async def test_delete(self, service: HotSearchService) -> None:
        await service.record_search("movie")
        assert await service.delete("movie") is True
        assert await service.delete("movie") is False

    async def test_clear(self, service: HotSearchService) -> None:
        await service.record_search("movie")
        await service.clear()
        assert await service.get_hot_searches() == []

    async def test_stats(self, service: HotSearchService) -> None:
        await service.record_search("a")
        await service.record_search("b")
        await service.record_search("b")
        stats = await service.get_stats()
        assert stats.total == 2
        assert [i.term for i in stats.top_terms] == ["b", "a"]

    def test_is_forbidden_is_case_insensitive(self, service: HotSearchService) -> None:
        assert service.is_forbidden("Spam")
        assert not service.is_forbidden("movie")

    def test_no_forbidden_terms(self) -> None:
        service = HotSearchService(MemoryHotSearchStore())
        assert not service.is_forbidden("anything")
        assert service.max_entries == 30
