"""Cache Port - Interface for the in-process result cache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheLookup(Generic[T]):
    """Result of a cache read. ``value`` is only meaningful when ``hit``."""

    hit: bool
    value: T | None = None


class CachePort(Protocol):
    """Port for a synchronous key-value cache with TTL support.

    Implementations:
      - MemoryCache (TTL + LRU + memory budget)

    Operations never suspend, so callers on the event loop can use them
    between awaits without locking.
    """

    def get(self, key: str) -> CacheLookup[Any]:
        """Look up a key. Expired entries count as misses."""
        ...

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        """Store a value for ``ttl_ms`` milliseconds."""
        ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...
