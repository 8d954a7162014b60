"""
Read-through / write-through response caching.

The cache plugin answers requests from the configured store while an entry
is fresh, and stores cacheable responses on a miss. Storage problems never
fail a request: read or write errors are logged and treated as a miss.
"""

import logging
import time
from email.utils import parsedate_to_datetime
from typing import Protocol

from ..cache import CacheConfig
from ..cache import CacheEntry
from ..logger import LoggerConfig
from ..transport import StreamFactory
from ..transport import create_stream
from ..transport.base import Request
from ..transport.base import Response
from . import NextHandler
from . import Plugin

logger = logging.getLogger("api_sdk.cache")

CACHEABLE_STATUS_CODES = frozenset({200, 203, 300, 301, 302, 404, 410})
NO_CACHE_DIRECTIVES = ("no-cache", "private", "no-store")


class CacheListener(Protocol):
    def on_cache_response(
        self,
        request: Request,
        response: Response,
        from_cache: bool,
        key: str,
        entry: CacheEntry | None,
    ) -> Response:
        """
        Called for every cacheable request.

        Args:
            request: The request being answered
            response: Response from the cache or from the transport
            from_cache: True on a cache hit
            key: Cache key of the request
            entry: The entry that was read (hit) or stored (miss), or None
                when a miss was not stored

        Returns:
            The response to hand back up the chain
        """


class CacheLoggerListener:
    """Log cache hits and newly cached responses."""

    def __init__(self, config: LoggerConfig):
        self.config = config

    def on_cache_response(
        self,
        request: Request,
        response: Response,
        from_cache: bool,
        key: str,
        entry: CacheEntry | None,
    ) -> Response:
        formatter = self.config.formatter
        if from_cache:
            self.config.logger.info(
                f"Cache hit:\n{formatter.format_request(request)}",
                extra={"key": key, "expires_at": entry.expires_at},
            )
        elif entry is not None:
            self.config.logger.info(
                f"Cached response:\n{formatter.format_response(response)}",
                extra={"key": key, "expires_at": entry.expires_at},
            )
        return response


def get_cache_control_directive(response: Response, name: str) -> str | bool | None:
    """
    Look up a Cache-Control directive.

    Returns the directive value, True for a bare flag such as ``no-store``,
    or None when the directive is absent.
    """
    header = response.get_header("Cache-Control")
    if not header:
        return None
    for part in header.split(","):
        directive, _, value = part.strip().partition("=")
        if directive.lower() == name:
            return value.strip('"') if value else True
    return None


class CachePlugin(Plugin):
    """
    Cache responses of the configured methods in the configured store.

    Args:
        config: Caching policy and store
        stream_factory: Builds body streams for responses served from the cache
        listeners: Notified about every hit and miss
    """

    def __init__(
        self,
        config: CacheConfig,
        stream_factory: StreamFactory = create_stream,
        listeners: list[CacheListener] | None = None,
    ):
        self.config = config
        self.stream_factory = stream_factory
        self.listeners = listeners or []

    def handle_request(self, request: Request, next_: NextHandler) -> Response:
        if request.method not in self.config.methods:
            return next_(request)

        key = self.config.key_generator.generate(request)

        cached = self._read(key)
        if cached is not None:
            entry, response = cached
            return self._notify(request, response, True, key, entry)

        response = next_(request)

        entry = None
        if self.is_cacheable(response):
            max_age = self.get_max_age(response)
            if max_age is not None and max_age > 0:
                entry = CacheEntry(
                    value=self._snapshot(response),
                    expires_at=time.time() + max_age,
                )
                if not self._write(key, entry, max_age):
                    entry = None

        return self._notify(request, response, False, key, entry)

    def is_cacheable(self, response: Response) -> bool:
        if response.status_code not in CACHEABLE_STATUS_CODES:
            return False
        for directive in NO_CACHE_DIRECTIVES:
            if directive not in self.config.cache_directives:
                continue
            if get_cache_control_directive(response, directive) is not None:
                return False
        return True

    def get_max_age(self, response: Response) -> int | None:
        """Freshness lifetime of *response* in seconds."""
        if "max-age" not in self.config.cache_directives:
            return self.config.ttl

        max_age = get_cache_control_directive(response, "max-age")
        if isinstance(max_age, str) and max_age.isdigit():
            age = response.get_header("Age", "0")
            return int(max_age) - (int(age) if age.isdigit() else 0)

        expires = response.get_header("Expires")
        if expires:
            try:
                return int(parsedate_to_datetime(expires).timestamp() - time.time())
            except (TypeError, ValueError):
                # invalid dates such as "0" mean already expired
                return 0

        return self.config.ttl

    def _read(self, key: str) -> tuple[CacheEntry, Response] | None:
        """Fresh entry for *key* and the response rebuilt from it, or None on a miss."""
        try:
            entry = self.config.store.get(key)
            if entry is None or entry.is_expired():
                return None
            # entries written by another version may not restore
            return entry, self._restore(entry)
        except Exception as e:
            logger.warning(f"Failed to read cache for {key}: {e}")
            return None

    def _write(self, key: str, entry: CacheEntry, ttl: int) -> bool:
        try:
            self.config.store.put(key, entry, ttl)
        except Exception as e:
            logger.warning(f"Failed to write to cache for {key}: {e}")
            return False
        return True

    def _snapshot(self, response: Response) -> dict:
        body = response.content
        response.stream.seek(0)
        return {
            "status_code": response.status_code,
            "reason_phrase": response.reason_phrase,
            "headers": dict(response.headers),
            "body": body,
        }

    def _restore(self, entry: CacheEntry) -> Response:
        value = entry.value
        return Response(
            status_code=value["status_code"],
            headers=value["headers"],
            stream=self.stream_factory(value["body"]),
            reason_phrase=value.get("reason_phrase"),
        )

    def _notify(
        self,
        request: Request,
        response: Response,
        from_cache: bool,
        key: str,
        entry: CacheEntry | None,
    ) -> Response:
        for listener in self.listeners:
            response = listener.on_cache_response(
                request, response, from_cache, key, entry
            )
        return response
