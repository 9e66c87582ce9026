"""In-memory plugin manager with priority ordering."""

from __future__ import annotations

from typing import Iterable

import structlog

from cloudseek.domain.plugins import PluginNotFoundError, SearchPluginProtocol

log = structlog.get_logger(__name__)


class PluginManager:
    """
    Holds registered search plugins.

    Plugins are injected by the composition root; there is no global
    registry. ``get_plugins()`` returns them sorted by ascending
    priority (lower runs and merges first); equal priorities keep
    registration order.
    """

    def __init__(self, plugins: Iterable[SearchPluginProtocol | None] = ()) -> None:
        self._plugins: list[SearchPluginProtocol] = []
        self.register_plugins(plugins)

    def register_plugin(self, plugin: SearchPluginProtocol | None) -> None:
        if plugin is None:
            return
        self._plugins.append(plugin)
        log.debug(
            "plugin_registered",
            plugin_name=plugin.name,
            priority=plugin.priority,
        )

    def register_plugins(
        self, plugins: Iterable[SearchPluginProtocol | None]
    ) -> None:
        for plugin in plugins:
            self.register_plugin(plugin)

    def get_plugins(self) -> list[SearchPluginProtocol]:
        # sorted() is stable, ties keep registration order
        return sorted(self._plugins, key=lambda p: p.priority)

    def get_plugin(self, name: str) -> SearchPluginProtocol | None:
        for plugin in self._plugins:
            if plugin.name == name:
                return plugin
        return None

    def get(self, name: str) -> SearchPluginProtocol:
        plugin = self.get_plugin(name)
        if plugin is None:
            raise PluginNotFoundError(f"Plugin '{name}' not found")
        return plugin

    def names(self) -> list[str]:
        return [p.name for p in self.get_plugins()]

    @property
    def size(self) -> int:
        return len(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def clear(self) -> None:
        self._plugins = []
