from .base import BaseSearchPlugin, SearchPluginProtocol
from .exceptions import (
    DuplicatePluginError,
    PluginError,
    PluginLoadError,
    PluginNotFoundError,
)

__all__ = [
    "BaseSearchPlugin",
    "DuplicatePluginError",
    "PluginError",
    "PluginLoadError",
    "PluginNotFoundError",
    "SearchPluginProtocol",
]
