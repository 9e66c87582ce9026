"""Port for plugin registration and access."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from cloudseek.domain.plugins.base import SearchPluginProtocol


@runtime_checkable
class PluginRegistryPort(Protocol):
    """Synchronous interface for registering and listing search plugins."""

    def register_plugin(self, plugin: SearchPluginProtocol | None) -> None: ...
    def register_plugins(
        self, plugins: Iterable[SearchPluginProtocol | None]
    ) -> None: ...
    def get_plugins(self) -> list[SearchPluginProtocol]: ...
    def get_plugin(self, name: str) -> SearchPluginProtocol | None: ...
    def get(self, name: str) -> SearchPluginProtocol: ...
    def names(self) -> list[str]: ...
