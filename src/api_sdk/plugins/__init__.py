"""
Plugin architecture for transport composition.

This module provides the plugin system that wraps cross-cutting behaviour
(content negotiation, authentication, caching, logging) around the raw
transport. Every plugin is registered with an explicit priority; the plugin
with the highest priority is the outermost wrapper, so it sees the request
first and the response last.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import IntEnum

from ..exceptions import PluginConflictError
from ..transport.base import BaseTransport
from ..transport.base import Request
from ..transport.base import Response

NextHandler = Callable[[Request], Response]


class PluginPriority(IntEnum):
    """Priorities of the built-in plugins."""

    CONTENT_TYPE = 40
    CONTENT_LENGTH = 32
    AUTHENTICATION = 24
    CACHE = 16
    LOGGER = 8


class Plugin(ABC):
    """
    Base class for request processing plugins.

    A plugin receives the request and a callable that forwards it to the next
    plugin in the chain (or to the transport). It may modify the request,
    answer it without calling ``next_``, or transform the response.
    """

    @abstractmethod
    def handle_request(self, request: Request, next_: NextHandler) -> Response:
        """
        Process a request on its way to the transport.

        Args:
            request: Outgoing request
            next_: Forwards a request to the rest of the chain

        Returns:
            Response to hand back to the previous plugin
        """


class PluginClient(BaseTransport):
    """
    Transport that runs every request through an ordered list of plugins
    before it reaches the wrapped transport.
    """

    def __init__(self, transport: BaseTransport, plugins: list[Plugin]):
        self._transport = transport
        self._plugins = list(plugins)

    def send_request(self, request: Request) -> Response:
        return self._handler(0)(request)

    def _handler(self, index: int) -> NextHandler:
        if index == len(self._plugins):
            return self._transport.send_request
        plugin = self._plugins[index]
        following = self._handler(index + 1)
        return lambda request: plugin.handle_request(request, following)

    def close(self):
        self._transport.close()


class PluginChain:
    """
    Ordered collection of plugins keyed by priority.

    Priorities are an explicit ordering contract: registering a second plugin
    at a priority already taken fails instead of replacing the first one.
    """

    def __init__(self):
        self._plugins: dict[int, Plugin] = {}

    def add_plugin(self, plugin: Plugin, priority: int) -> "PluginChain":
        """Add a plugin at the given priority."""
        if priority in self._plugins:
            raise PluginConflictError(
                f"A plugin with priority {priority} already exists."
            )
        self._plugins[priority] = plugin
        # keep highest priority first
        self._plugins = dict(sorted(self._plugins.items(), reverse=True))
        return self

    def has_priority(self, priority: int) -> bool:
        return priority in self._plugins

    @property
    def plugins(self) -> list[Plugin]:
        """Plugins in execution order, highest priority first."""
        return list(self._plugins.values())

    @property
    def priorities(self) -> list[int]:
        return list(self._plugins.keys())

    def __len__(self) -> int:
        return len(self._plugins)

    def build(self, transport: BaseTransport) -> PluginClient:
        """Compose every plugin around *transport* into a single transport."""
        return PluginClient(transport, self.plugins)


__all__ = [
    "NextHandler",
    "Plugin",
    "PluginChain",
    "PluginClient",
    "PluginPriority",
]
