from .cache import CacheLookup, CachePort
from .channel_searcher import ChannelSearcherPort
from .hot_search_store import HotSearchStorePort
from .plugin_registry import PluginRegistryPort

__all__ = [
    "CacheLookup",
    "CachePort",
    "ChannelSearcherPort",
    "HotSearchStorePort",
    "PluginRegistryPort",
]
