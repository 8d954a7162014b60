"""
Response cache storage for API SDK.

This module defines what the cache plugin stores and where:

- CacheEntry: a serialised response plus the moment it stops being fresh
- CacheStore: the storage contract (get / put / delete / clear)
- MemoryCacheStore: in-process store backed by cachetools
- DiskCacheStore: persistent store backed by diskcache
- CacheKeyGenerator: derives the cache key from a request
- CacheConfig: ties a store to the caching policy
"""

import hashlib
import math
import time
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

import diskcache
from cachetools import TLRUCache

from .transport.base import Request


@dataclass
class CacheEntry:
    """
    Attributes:
        value: Serialised response with ``status_code``, ``reason_phrase``,
            ``headers`` and ``body`` (bytes).
        expires_at: UNIX timestamp after which the entry is stale,
            or None for an entry that never goes stale.
    """

    value: dict[str, Any]
    expires_at: float | None = None

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at


class CacheStore:
    """Abstract interface for cache storage."""

    def get(self, key: str) -> CacheEntry | None:
        raise NotImplementedError

    def put(self, key: str, entry: CacheEntry, ttl: int | None = None):
        """Store *entry*; the store may evict it after *ttl* seconds."""
        raise NotImplementedError

    def delete(self, key: str):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


def _item_deadline(_key, item, _now):
    return item[1]


class MemoryCacheStore(CacheStore):
    """In-process store; entries live until their TTL passes or maxsize evicts them."""

    def __init__(self, maxsize: int = 1024):
        self._cache = TLRUCache(maxsize=maxsize, ttu=_item_deadline, timer=time.time)

    def get(self, key: str) -> CacheEntry | None:
        item = self._cache.get(key)
        return item[0] if item is not None else None

    def put(self, key: str, entry: CacheEntry, ttl: int | None = None):
        deadline = time.time() + ttl if ttl is not None else math.inf
        self._cache[key] = (entry, deadline)

    def delete(self, key: str):
        self._cache.pop(key, None)

    def clear(self):
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


class DiskCacheStore(CacheStore):
    """
    Persistent store in a diskcache directory, shared between processes.

    Example:
        store = DiskCacheStore(Path.home() / ".cache" / "pokeapi")
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self._cache = diskcache.Cache(str(self.directory))

    def get(self, key: str) -> CacheEntry | None:
        return self._cache.get(key)

    def put(self, key: str, entry: CacheEntry, ttl: int | None = None):
        self._cache.set(key, entry, expire=ttl)

    def delete(self, key: str):
        self._cache.delete(key)

    def clear(self):
        self._cache.clear()

    def close(self):
        self._cache.close()


class CacheKeyGenerator:
    """
    Derive cache keys from method, URL, selected headers and body.

    Args:
        vary_headers: Request headers that take part in the key. The defaults
            keep responses for different credentials or representations apart.
    """

    def __init__(self, vary_headers: tuple[str, ...] = ("Authorization", "Accept")):
        self.vary_headers = tuple(vary_headers)

    def generate(self, request: Request) -> str:
        parts = [request.method, request.url]
        for name in self.vary_headers:
            parts.append(f"{name.lower()}:{request.get_header(name, '')}")
        digest = hashlib.sha256(" ".join(parts).encode())
        digest.update(request.read_body() or b"")
        return digest.hexdigest()


@dataclass
class CacheConfig:
    """
    Caching policy.

    Attributes:
        store: Where entries live.
        ttl: Freshness lifetime in seconds when the response carries no
            usable directive. None means only response directives count.
        methods: HTTP methods whose responses are cached.
        cache_directives: Response Cache-Control directives to respect.
            ``max-age`` enables max-age/Expires; ``no-cache``, ``private``
            and ``no-store`` each veto storing when present.
        key_generator: Computes the cache key of a request.
    """

    store: CacheStore
    ttl: int | None = 60
    methods: tuple[str, ...] = ("GET", "HEAD")
    cache_directives: tuple[str, ...] = ("max-age",)
    key_generator: CacheKeyGenerator = field(default_factory=CacheKeyGenerator)

    def __post_init__(self):
        self.methods = tuple(method.upper() for method in self.methods)
        self.cache_directives = tuple(d.lower() for d in self.cache_directives)
