from __future__ import annotations

import importlib.util
import traceback
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog

from cloudseek.domain.plugins import (
    DuplicatePluginError,
    PluginLoadError,
    SearchPluginProtocol,
)

log = structlog.get_logger(__name__)


def _import_module_from_path(path: Path) -> ModuleType:
    module_name = f"cloudseek_dynamic_plugin_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Could not create import spec for {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)  # type: ignore[union-attr]
    except SyntaxError as e:
        tb = traceback.format_exc()
        raise PluginLoadError(f"SyntaxError while importing {path}:\n{tb}") from e
    except Exception as e:
        tb = traceback.format_exc()
        raise PluginLoadError(f"Error while importing {path}:\n{tb}") from e

    return module


def load_python_plugin(path: Path) -> SearchPluginProtocol:
    try:
        module = _import_module_from_path(path)
        if not hasattr(module, "plugin"):
            raise PluginLoadError("Plugin must export 'plugin' variable")

        plugin: Any = getattr(module, "plugin")
        if not callable(getattr(plugin, "search", None)):
            raise PluginLoadError("Plugin must have 'search' method")
        name = getattr(plugin, "name", None)
        if not isinstance(name, str) or not name:
            raise PluginLoadError("Plugin must have non-empty 'name' attribute")
        priority = getattr(plugin, "priority", None)
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise PluginLoadError("Plugin must have integer 'priority' attribute")
        for method in ("set_main_cache_key", "set_current_keyword"):
            if not callable(getattr(plugin, method, None)):
                raise PluginLoadError(f"Plugin must have '{method}' method")

        return plugin
    except PluginLoadError as e:
        log.error(
            "plugin_load_failed",
            plugin_file=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise


def load_plugins_from_dir(plugin_dir: Path) -> list[SearchPluginProtocol]:
    """Load every ``*.py`` plugin in *plugin_dir* (sorted by file name).

    Files that fail to load are logged and skipped. Files starting with
    an underscore are ignored.

    Raises:
        DuplicatePluginError: Two files export plugins with the same name.
    """
    if not plugin_dir.exists() or not plugin_dir.is_dir():
        log.warning("plugin_directory_not_found", directory=str(plugin_dir))
        return []

    plugins: list[SearchPluginProtocol] = []
    loaded_names: set[str] = set()

    for path in sorted(plugin_dir.iterdir(), key=lambda p: p.name):
        if path.is_dir() or path.suffix.lower() != ".py":
            continue
        if path.name.startswith("_"):
            continue

        try:
            plugin = load_python_plugin(path)
        except PluginLoadError:
            continue

        if plugin.name in loaded_names:
            raise DuplicatePluginError(f"Plugin name '{plugin.name}' already exists")
        loaded_names.add(plugin.name)
        plugins.append(plugin)
        log.info(
            "plugin_loaded",
            plugin_name=plugin.name,
            priority=plugin.priority,
            plugin_file=path.name,
        )

    log.info(
        "plugins_discovered",
        count=len(plugins),
        directory=str(plugin_dir),
    )
    if not plugins:
        log.warning("no_plugins_found", directory=str(plugin_dir))

    return plugins
