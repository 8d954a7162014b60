"""
API SDK - Toolkit for building typed clients for HTTP APIs.

This SDK provides:
- Api base class with a single request() primitive
- Plugin chain for content detection, authentication, caching and logging
- Multiple HTTP transport support
- Request lifecycle listeners for typed errors and response decoding
- Token management with caching
"""

from .api import Api
from .auth import Authentication
from .auth import BasicAuthentication
from .auth import BearerAuthentication
from .auth import ChainAuthentication
from .auth import HeaderAuthentication
from .auth import QueryParamAuthentication
from .auth import RefreshTokenAuthentication
from .cache import CacheConfig
from .cache import CacheKeyGenerator
from .cache import CacheStore
from .cache import DiskCacheStore
from .cache import MemoryCacheStore
from .config import ApiSettings
from .events import EventPipeline
from .events import Stage
from .exceptions import ApiSDKError
from .exceptions import AuthError
from .exceptions import ConfigError
from .exceptions import ListenerError
from .exceptions import PluginConflictError
from .exceptions import TransportError
from .logger import FullHttpMessageFormatter
from .logger import LoggerConfig
from .logger import SimpleFormatter
from .plugins import Plugin
from .plugins import PluginPriority
from .token_store import FileTokenStore
from .token_store import MemoryTokenStore
from .token_store import TokenStore
from .transport import TransportConfig
from .transport.base import Request
from .transport.base import Response

__version__ = "1.0.0"

__all__ = [
    "Api",
    "ApiSettings",
    "ApiSDKError",
    "AuthError",
    "ConfigError",
    "ListenerError",
    "PluginConflictError",
    "TransportError",
    "Authentication",
    "BasicAuthentication",
    "BearerAuthentication",
    "ChainAuthentication",
    "HeaderAuthentication",
    "QueryParamAuthentication",
    "RefreshTokenAuthentication",
    "CacheConfig",
    "CacheKeyGenerator",
    "CacheStore",
    "DiskCacheStore",
    "MemoryCacheStore",
    "EventPipeline",
    "Stage",
    "FullHttpMessageFormatter",
    "LoggerConfig",
    "SimpleFormatter",
    "Plugin",
    "PluginPriority",
    "Request",
    "Response",
    "TransportConfig",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
]
