"""
Base class for typed HTTP API clients.

This module provides the Api class that concrete API clients extend. It turns a
single `request()` call into a full request lifecycle:

- Base URL, query and header defaults merged under per-request values
- Pluggable HTTP transport (httpx by default, requests optional)
- Content-Type detection and Content-Length computation
- Optional authentication strategy
- Optional response caching with TTL and Cache-Control support
- Optional request/response logging
- Pre-request, post-request and response-contents listeners

The plugin chain is rebuilt from the current configuration on every call, so
configuration changes between calls always take effect.

Example usage:
    import json

    from api_sdk import Api, ListenerError

    class PokemonNotFound(ListenerError): ...

    class PokeApi(Api):
        def __init__(self):
            super().__init__()
            self.set_base_url("https://pokeapi.co/api/v2")
            self.add_post_request_listener(self._raise_on_status)
            self.add_response_contents_listener(json.loads)

        def get_pokemon(self, name: str) -> dict:
            return self.request("GET", self.build_path("/pokemon/{name}", {"name": name}))

        @staticmethod
        def _raise_on_status(request, response):
            if response.status_code == 404:
                raise PokemonNotFound(f"{request.url} not found")

    with PokeApi() as api:
        pikachu = api.get_pokemon("pikachu")
"""

import logging
from collections.abc import Mapping
from typing import Any
from typing import BinaryIO

from .auth import Authentication
from .auth import RefreshTokenAuthentication
from .cache import CacheConfig
from .cache import CacheStore
from .cache import MemoryCacheStore
from .config import ApiSettings
from .events import EventPipeline
from .events import PostRequestHandler
from .events import PreRequestHandler
from .events import ResponseContentsHandler
from .events import Stage
from .exceptions import ConfigError
from .exceptions import PluginConflictError
from .helpers import build_path
from .helpers import merge_headers
from .helpers import reduce_duplicate_slashes
from .helpers import validate_url
from .logger import LoggerConfig
from .plugins import Plugin
from .plugins import PluginChain
from .plugins import PluginPriority
from .plugins.auth import AuthenticationPlugin
from .plugins.cache import CacheLoggerListener
from .plugins.cache import CachePlugin
from .plugins.content import ContentLengthPlugin
from .plugins.content import ContentTypePlugin
from .plugins.logger import LoggerPlugin
from .token_store import FileTokenStore
from .transport import TransportConfig
from .transport import get_transport
from .transport.base import encode_query

logger = logging.getLogger("api_sdk.api")


class Api:
    """
    Base class for API clients built on a single `request()` primitive.

    Configuration is kept on the instance and read at request time. Configure
    the instance fully before sharing it between threads; the setters do no
    locking.

    Args:
        transport_config (TransportConfig | None): Transport and factories to use.
            Defaults to the transport named in settings.
        settings (ApiSettings | None): Defaults loaded from the environment
            (API_SDK_ prefix).
    """

    def __init__(
        self,
        transport_config: TransportConfig | None = None,
        settings: ApiSettings | None = None,
    ):
        self.settings = settings or ApiSettings()

        self._base_url: str | None = None
        self._query_defaults: dict[str, Any] = {}
        self._header_defaults: dict[str, str] = {}
        self._transport_config = transport_config or TransportConfig(
            transport=get_transport(self.settings.transport, timeout=self.settings.timeout)
        )
        self._cache_config: CacheConfig | None = None
        self._logger_config: LoggerConfig | None = None
        self._authentication: Authentication | None = None
        self._plugins: dict[int, Plugin] = {}
        self._events = EventPipeline()

        if self.settings.base_url:
            self.set_base_url(self.settings.base_url)

    def request(
        self,
        method: str,
        path: str,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: str | bytes | BinaryIO | None = None,
    ) -> Any:
        """
        Send a request relative to the base URL and return the response contents.

        Args:
            method (str): HTTP method, e.g. 'GET', 'POST'
            path (str): Path appended to the base URL
            query (Mapping | None): Query values, merged over the query defaults
            headers (Mapping | None): Header values, merged over the header defaults
            body (str | bytes | BinaryIO | None): Request body

        Returns:
            The response body as a string, or whatever the response-contents
            listeners turned it into.

        Raises:
            ConfigError: If no base URL is set or the plugin configuration conflicts
            TransportError: On network failures
            Exception: Whatever a listener raises, unchanged
        """
        if not self._base_url:
            raise ConfigError("A base URL must be set.")

        # request values overwrite defaults
        query = {**self._query_defaults, **(query or {})}
        headers = merge_headers(self._header_defaults, headers or {})

        request = self._transport_config.request_factory(
            method,
            self._create_uri(path, query),
            headers,
            self._create_body(body),
        )

        request = self._events.dispatch_pre_request(request)

        client = self.build_plugin_chain().build(self._transport_config.transport)
        logger.debug(f"{request.method} {request.url}")
        response = client.send_request(request)

        response = self._events.dispatch_post_request(request, response)

        # get_contents() rewinds the stream in case a listener already read it
        contents = response.get_contents()

        return self._events.dispatch_response_contents(contents)

    def build_plugin_chain(self) -> PluginChain:
        """Assemble the plugin chain for the current configuration."""
        chain = PluginChain()

        # help servers understand the content
        chain.add_plugin(ContentTypePlugin(), PluginPriority.CONTENT_TYPE)
        chain.add_plugin(ContentLengthPlugin(), PluginPriority.CONTENT_LENGTH)

        if self._authentication is not None:
            chain.add_plugin(
                AuthenticationPlugin(self._authentication),
                PluginPriority.AUTHENTICATION,
            )

        if self._cache_config is not None:
            listeners = []
            if self._logger_config is not None:
                listeners.append(CacheLoggerListener(self._logger_config))
            chain.add_plugin(
                CachePlugin(
                    self._cache_config,
                    stream_factory=self._transport_config.stream_factory,
                    listeners=listeners,
                ),
                PluginPriority.CACHE,
            )

        if self._logger_config is not None:
            chain.add_plugin(LoggerPlugin(self._logger_config), PluginPriority.LOGGER)

        for priority, plugin in self._plugins.items():
            chain.add_plugin(plugin, priority)

        return chain

    def add_plugin(self, plugin: Plugin, priority: int) -> "Api":
        """
        Register a custom plugin that runs on every request.

        Raises:
            PluginConflictError: If the priority belongs to a built-in plugin
                or to another custom plugin.
        """
        reserved = {p.value: p for p in PluginPriority}
        if priority in reserved:
            raise PluginConflictError(
                f"Priority {priority} is reserved for the "
                f"{reserved[priority].name.lower()} plugin."
            )
        if priority in self._plugins:
            raise PluginConflictError(
                f"A plugin with priority {priority} already exists."
            )
        self._plugins[priority] = plugin
        return self

    def remove_plugin(self, priority: int) -> "Api":
        self._plugins.pop(priority, None)
        return self

    def build_path(self, template: str, parameters: Mapping[str, Any]) -> str:
        return build_path(template, parameters)

    def get_base_url(self) -> str | None:
        return self._base_url

    def set_base_url(self, base_url: str) -> "Api":
        self._base_url = validate_url(base_url)
        return self

    def get_query_default(self, name: str) -> Any:
        return self._query_defaults.get(name)

    def add_query_default(self, name: str, value: Any) -> "Api":
        self._query_defaults[name] = value
        return self

    def remove_query_default(self, name: str) -> "Api":
        self._query_defaults.pop(name, None)
        return self

    def get_header_default(self, name: str) -> str | None:
        return self._header_defaults.get(name)

    def add_header_default(self, name: str, value: str) -> "Api":
        self._header_defaults[name] = value
        return self

    def remove_header_default(self, name: str) -> "Api":
        self._header_defaults.pop(name, None)
        return self

    def get_transport_config(self) -> TransportConfig:
        return self._transport_config

    def set_transport_config(self, transport_config: TransportConfig) -> "Api":
        self._transport_config = transport_config
        return self

    def get_cache_config(self) -> CacheConfig | None:
        return self._cache_config

    def set_cache_config(self, cache_config: CacheConfig | None) -> "Api":
        self._cache_config = cache_config
        return self

    def enable_cache(self, store: CacheStore | None = None) -> "Api":
        """
        Cache GET/HEAD responses for ``settings.cache_ttl`` seconds.

        Args:
            store (CacheStore | None): Where entries live. Defaults to an
                in-process MemoryCacheStore.
        """
        return self.set_cache_config(
            CacheConfig(store=store or MemoryCacheStore(), ttl=self.settings.cache_ttl)
        )

    def get_logger_config(self) -> LoggerConfig | None:
        return self._logger_config

    def set_logger_config(self, logger_config: LoggerConfig | None) -> "Api":
        self._logger_config = logger_config
        return self

    def get_authentication(self) -> Authentication | None:
        return self._authentication

    def set_authentication(self, authentication: Authentication | None) -> "Api":
        self._authentication = authentication
        return self

    def enable_refresh_token_auth(
        self, token_url: str, refresh_token: str, **kwargs: Any
    ) -> "Api":
        """
        Authenticate with access tokens obtained from a refresh token.

        Tokens are persisted in ``settings.token_cache_path`` so later
        processes reuse them. Extra keyword arguments go to
        RefreshTokenAuthentication.
        """
        kwargs.setdefault("token_store", FileTokenStore(self.settings.token_cache_path))
        return self.set_authentication(
            RefreshTokenAuthentication(token_url, refresh_token, **kwargs)
        )

    def add_pre_request_listener(self, handler: PreRequestHandler, priority: int = 0) -> "Api":
        self._events.add_listener(Stage.PRE_REQUEST, handler, priority)
        return self

    def add_post_request_listener(self, handler: PostRequestHandler, priority: int = 0) -> "Api":
        self._events.add_listener(Stage.POST_REQUEST, handler, priority)
        return self

    def add_response_contents_listener(
        self, handler: ResponseContentsHandler, priority: int = 0
    ) -> "Api":
        self._events.add_listener(Stage.RESPONSE_CONTENTS, handler, priority)
        return self

    def get_event_pipeline(self) -> EventPipeline:
        return self._events

    def close(self):
        """Release connections held by the transport."""
        self._transport_config.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _create_uri(self, path: str, query: Mapping[str, Any]) -> str:
        uri = reduce_duplicate_slashes(f"{self._base_url}{path}")
        if query:
            separator = "&" if "?" in uri else "?"
            uri = f"{uri}{separator}{encode_query(query)}"
        return uri

    def _create_body(self, body: str | bytes | BinaryIO | None) -> BinaryIO | None:
        if body is None:
            return None
        if isinstance(body, (str, bytes)):
            return self._transport_config.stream_factory(body)
        return body
