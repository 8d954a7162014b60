"""
Transport layer for API SDK.

This module provides a unified transport interface that abstracts different HTTP clients.
The SDK supports two transport backends:

- httpx: Modern HTTP client (default, recommended)
- requests: Classic HTTP client, installed with the `requests` extra

All transports implement the same interface, making them interchangeable.
"""

import io
from collections.abc import Callable
from dataclasses import dataclass
from typing import BinaryIO

from ..exceptions import ConfigError
from .base import BaseTransport
from .base import Request
from .base import Response
from .httpx import HttpxTransport

RequestFactory = Callable[..., Request]
StreamFactory = Callable[[bytes | str], BinaryIO]


def create_stream(data: bytes | str) -> BinaryIO:
    """Wrap raw body data in a rewindable binary stream."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return io.BytesIO(data)


@dataclass
class TransportConfig:
    """
    Everything the SDK needs to turn a call into network traffic.

    Attributes:
        transport: Backend that actually sends requests.
        request_factory: Builds the outgoing Request from
            ``(method, url, headers, body)``.
        stream_factory: Wraps body data in a rewindable stream. Used for
            string request bodies and for responses rebuilt from the cache.
    """

    transport: BaseTransport
    request_factory: RequestFactory = Request
    stream_factory: StreamFactory = create_stream


def get_transport(name: str, timeout: float = 30.0) -> BaseTransport:
    """
    Get transport instance by name.

    Available transports:
    - httpx: httpx.Client (default)
    - requests: requests.Session
    """
    name = name.lower()
    if name == "httpx":
        return HttpxTransport(timeout)
    elif name == "requests":
        try:
            from .requests import RequestsTransport

            return RequestsTransport(timeout)
        except ImportError as err:
            raise ImportError(
                "requests transport requires requests package. Install with: pip install api-sdk[requests]"
            ) from err
    else:
        raise ConfigError(f"Unknown transport: {name}. Available: httpx, requests")


__all__ = [
    "BaseTransport",
    "HttpxTransport",
    "Request",
    "Response",
    "TransportConfig",
    "create_stream",
    "get_transport",
]
