"""Search entities shared by plugins, the orchestrator and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

ResultType = Literal["results", "merged_by_type", "all"]
SourceType = Literal["all", "tg", "plugin"]

# Reserved ext key carrying a per-call plugin timeout override.
PLUGIN_TIMEOUT_EXT_KEY = "__plugin_timeout_ms"


@dataclass(frozen=True)
class Link:
    """A single resource link.

    Two links are the same resource when their URLs match; the other
    fields are informational.
    """

    type: str
    url: str
    password: str = ""
    title: str = ""
    datetime: str = ""
    source: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "url": self.url, "password": self.password}

    def to_merged_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "password": self.password,
            "title": self.title,
            "datetime": self.datetime,
            "source": self.source,
        }


# storage type -> links in first-seen order, URLs unique per type
MergedLinks = dict[str, list[Link]]


@dataclass(frozen=True)
class SearchResult:
    """One hit returned by a plugin or channel."""

    unique_id: str
    channel: str
    datetime: str
    title: str
    content: str = ""
    links: tuple[Link, ...] = ()
    message_id: str = ""

    def __post_init__(self) -> None:
        # Accept lists from plugins but keep the record immutable.
        if not isinstance(self.links, tuple):
            object.__setattr__(self, "links", tuple(self.links))
        if not self.message_id:
            object.__setattr__(self, "message_id", self.unique_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message_id": self.message_id,
            "unique_id": self.unique_id,
            "channel": self.channel,
            "datetime": self.datetime,
            "title": self.title,
            "content": self.content,
            "links": [link.to_dict() for link in self.links],
        }


@dataclass(frozen=True)
class SearchRequestProfile:
    """Validated, normalized search parameters (read-only to the core)."""

    keyword: str
    channels: tuple[str, ...] | None = None
    plugins: tuple[str, ...] | None = None
    cloud_types: tuple[str, ...] | None = None
    concurrency: int | None = None
    force_refresh: bool = False
    result_type: ResultType = "merged_by_type"
    source_type: SourceType = "all"
    ext: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("channels", "plugins", "cloud_types"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        object.__setattr__(self, "ext", MappingProxyType(dict(self.ext or {})))

    @property
    def plugin_timeout_ms(self) -> int | None:
        """Per-call plugin timeout from the ext bag, if valid."""
        raw = self.ext.get(PLUGIN_TIMEOUT_EXT_KEY)
        if isinstance(raw, bool):
            return None
        try:
            value = int(raw)
        except (TypeError, ValueError):
            return None
        return value if value > 0 else None


@dataclass
class SearchResponse:
    """Shaped search result.

    ``total`` is the number of raw results, independent of the shape.
    """

    total: int
    results: list[SearchResult] | None = None
    merged_by_type: MergedLinks | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"total": self.total}
        if self.results is not None:
            out["results"] = [r.to_dict() for r in self.results]
        if self.merged_by_type is not None:
            out["merged_by_type"] = {
                cloud_type: [link.to_merged_dict() for link in links]
                for cloud_type, links in self.merged_by_type.items()
            }
        return out
