"""Tests for AppError and hot-search entities."""

from __future__ import annotations

from cloudseek.domain.entities import AppError, ErrorCode, HotSearchItem, HotSearchStats
from cloudseek.domain.entities.hot_search import rank_key


class TestAppError:
    def test_client_errors_are_not_logged(self) -> None:
        err = AppError.bad_request(ErrorCode.VALIDATION_ERROR, "bad")
        assert err.status_code == 400
        assert err.should_log is False
        assert err.is_client_error

    def test_server_errors_are_logged(self) -> None:
        err = AppError.internal(ErrorCode.INTERNAL_ERROR, "boom")
        assert err.status_code == 500
        assert err.should_log is True
        assert err.is_server_error

    def test_to_response_envelope(self) -> None:
        err = AppError.too_many_requests(
            ErrorCode.RATE_LIMIT_EXCEEDED, "slow down", {"retry_after_seconds": 5}
        )
        assert err.to_response() == {
            "code": "RATE_LIMIT_EXCEEDED",
            "message": "slow down",
            "data": None,
            "error": {"status_code": 429, "details": {"retry_after_seconds": 5}},
        }


class TestHotSearchItem:
    def test_to_dict_renders_iso_timestamps(self) -> None:
        item = HotSearchItem(term="abc", score=2, last_searched=0, created_at=0)
        d = item.to_dict()
        assert d["last_searched"] == "1970-01-01T00:00:00Z"
        assert d["score"] == 2

    def test_rank_key_orders_by_score_then_recency(self) -> None:
        items = [
            HotSearchItem(term="a", score=1, last_searched=300),
            HotSearchItem(term="b", score=3, last_searched=100),
            HotSearchItem(term="c", score=3, last_searched=200),
        ]
        assert [i.term for i in sorted(items, key=rank_key)] == ["c", "b", "a"]

    def test_stats_to_dict(self) -> None:
        stats = HotSearchStats(total=1, top_terms=[HotSearchItem(term="x")])
        assert stats.to_dict()["top_terms"][0]["term"] == "x"
