from .loader import (
    load_plugins_from_dir,
    load_python_plugin,
)
from .manager import PluginManager

__all__ = [
    "PluginManager",
    "load_plugins_from_dir",
    "load_python_plugin",
]
