"""Cache Infrastructure - in-process result cache."""

from .memory_cache import CacheStats, MemoryCache, estimate_size

__all__ = [
    "CacheStats",
    "MemoryCache",
    "estimate_size",
]
