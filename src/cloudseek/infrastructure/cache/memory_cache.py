"""In-process cache with TTL, LRU ordering and a memory budget."""

from __future__ import annotations

import dataclasses
import json
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from cloudseek.domain.ports.cache import CacheLookup

log = structlog.get_logger(__name__)

DEFAULT_MAX_SIZE = 1000
DEFAULT_MAX_MEMORY_BYTES = 100 * 1024 * 1024
DEFAULT_CLEANUP_INTERVAL_MS = 5 * 60 * 1000
DEFAULT_MEMORY_THRESHOLD = 0.8

# Share of current usage released when the threshold is crossed.
_THRESHOLD_RELEASE_RATIO = 0.1
_FALLBACK_SIZE = 64


@dataclass
class _CacheRecord:
    value: Any
    expires_at: float
    size: int


@dataclass(frozen=True)
class CacheStats:
    total: int
    active: int
    expired: int
    max_size: int
    memory_bytes: int
    max_memory_bytes: int
    memory_usage_percent: float
    hits: int
    misses: int
    evictions: int

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"not serialisable: {type(obj).__name__}")


def estimate_size(value: Any) -> int:
    """Rough byte size of *value* (UTF-16 style: two bytes per character).

    Never raises; unserialisable values count as 64 bytes.
    """
    try:
        if value is None:
            return 8
        if isinstance(value, bool):
            return 4
        if isinstance(value, (int, float)):
            return 8
        if isinstance(value, str):
            return len(value) * 2
        encoded = json.dumps(value, default=_json_default, ensure_ascii=False)
        return len(encoded) * 2 if encoded else _FALLBACK_SIZE
    except (TypeError, ValueError, RecursionError):
        return _FALLBACK_SIZE


class MemoryCache:
    """Bounded key/value cache with per-entry TTL and strict LRU eviction.

    Bounds are enforced on two axes: entry count (``max_size``) and the
    estimated byte size of all stored values (``max_memory_bytes``).
    Expired entries are purged lazily on access and during the
    opportunistic cleanup that ``get``/``set`` run at most once per
    ``cleanup_interval_ms``. Above ``memory_threshold`` utilisation the
    cleanup also releases about a tenth of current usage.

    Not thread-safe. Every operation completes without suspending, which
    is sufficient inside a single asyncio event loop.

    Args:
        max_size: Maximum number of entries.
        max_memory_bytes: Maximum estimated memory of all values.
        cleanup_interval_ms: Minimum time between opportunistic cleanups.
        memory_threshold: Utilisation (0-1] that triggers proactive eviction.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        *,
        max_size: int = DEFAULT_MAX_SIZE,
        max_memory_bytes: int = DEFAULT_MAX_MEMORY_BYTES,
        cleanup_interval_ms: int = DEFAULT_CLEANUP_INTERVAL_MS,
        memory_threshold: float = DEFAULT_MEMORY_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_size = max_size
        self.max_memory_bytes = max_memory_bytes
        self.cleanup_interval_ms = cleanup_interval_ms
        self.memory_threshold = memory_threshold
        self._clock = clock

        self._store: OrderedDict[str, _CacheRecord] = OrderedDict()
        self._memory = 0
        self._last_cleanup: float | None = None

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    # --- internals ---
    def _now(self) -> float:
        return self._clock()

    def _remove(self, key: str) -> _CacheRecord | None:
        rec = self._store.pop(key, None)
        if rec is not None:
            self._memory -= rec.size
        return rec

    def _purge_expired(self) -> int:
        now = self._now()
        expired = [k for k, rec in self._store.items() if rec.expires_at <= now]
        for key in expired:
            self._remove(key)
        return len(expired)

    def _evict_lru(self, count: int) -> None:
        for _ in range(count):
            if not self._store:
                break
            key = next(iter(self._store))
            self._remove(key)
            self._evictions += 1

    def _evict_for_memory(self, bytes_to_free: float) -> None:
        freed = 0
        while freed < bytes_to_free and self._store:
            key = next(iter(self._store))
            rec = self._remove(key)
            if rec is not None:
                freed += rec.size
                self._evictions += 1

    def _cleanup(self, force: bool = False) -> None:
        now = self._now()
        if (
            not force
            and self._last_cleanup is not None
            and (now - self._last_cleanup) * 1000 < self.cleanup_interval_ms
        ):
            return
        self._last_cleanup = now

        expired = self._purge_expired()

        size_over = len(self._store) - self.max_size
        if size_over > 0:
            self._evict_lru(size_over)

        memory_over = self._memory - self.max_memory_bytes
        if memory_over > 0:
            self._evict_for_memory(memory_over)

        usage = self._memory
        if usage / self.max_memory_bytes > self.memory_threshold:
            self._evict_for_memory(usage * _THRESHOLD_RELEASE_RATIO)

        if expired:
            log.debug(
                "memory_cache_cleanup",
                expired=expired,
                entries=len(self._store),
                memory_bytes=self._memory,
            )

    # --- CachePort implementation ---
    def get(self, key: str) -> CacheLookup[Any]:
        self._cleanup()

        rec = self._store.get(key)
        if rec is None:
            self._misses += 1
            return CacheLookup(hit=False)

        if rec.expires_at > self._now():
            self._store.move_to_end(key)
            self._hits += 1
            return CacheLookup(hit=True, value=rec.value)

        self._remove(key)
        self._misses += 1
        return CacheLookup(hit=False)

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        self._cleanup()
        self._remove(key)

        size = estimate_size(value)
        if size > self.max_memory_bytes:
            log.warning(
                "memory_cache_value_too_large",
                key=key,
                size=size,
                max_memory_bytes=self.max_memory_bytes,
            )
            return

        record = _CacheRecord(
            value=value,
            expires_at=self._now() + max(0, ttl_ms) / 1000,
            size=size,
        )

        if (
            len(self._store) >= self.max_size
            or self._memory + size > self.max_memory_bytes
        ):
            self._purge_expired()
            if len(self._store) >= self.max_size:
                self._evict_lru(len(self._store) - self.max_size + 1)
            if self._memory + size > self.max_memory_bytes:
                self._evict_for_memory(self._memory + size - self.max_memory_bytes)

        self._store[key] = record
        self._memory += size

    def delete(self, key: str) -> None:
        self._remove(key)

    def clear(self) -> None:
        self._store.clear()
        self._memory = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    # --- introspection ---
    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def memory_usage(self) -> int:
        return self._memory

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return list(self._store)

    def get_stats(self) -> CacheStats:
        now = self._now()
        active = sum(1 for rec in self._store.values() if rec.expires_at > now)
        percent = self._memory / self.max_memory_bytes * 100
        return CacheStats(
            total=len(self._store),
            active=active,
            expired=len(self._store) - active,
            max_size=self.max_size,
            memory_bytes=self._memory,
            max_memory_bytes=self.max_memory_bytes,
            memory_usage_percent=round(percent, 2),
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def force_cleanup(self) -> None:
        """Run the cleanup now, ignoring the interval gate."""
        self._cleanup(force=True)
