"""Hot-search stores - backend implementations."""

from .diskcache_store import DiskcacheHotSearchStore
from .memory_store import MemoryHotSearchStore
from .store_factory import HotSearchBackend, create_hot_search_store

__all__ = [
    "DiskcacheHotSearchStore",
    "HotSearchBackend",
    "MemoryHotSearchStore",
    "create_hot_search_store",
]
