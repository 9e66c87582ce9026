from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _iso(epoch_ms: int) -> str:
    dt = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


@dataclass
class HotSearchItem:
    term: str
    score: int = 1
    last_searched: int = 0  # epoch ms
    created_at: int = 0  # epoch ms

    def to_dict(self) -> dict[str, object]:
        return {
            "term": self.term,
            "score": self.score,
            "last_searched": _iso(self.last_searched),
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class HotSearchStats:
    total: int
    top_terms: list[HotSearchItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "top_terms": [item.to_dict() for item in self.top_terms],
        }


def rank_key(item: HotSearchItem) -> tuple[int, int]:
    """Sort key: score desc, then most recently searched first."""
    return (-item.score, -item.last_searched)
