"""
Custom exceptions for the API SDK.
Provides meaningful error classes so client code can branch on the cause of a failure:
configuration, network, authentication or a listener rejecting a response.
"""

from typing import Any, Optional


class ApiSDKError(Exception):
    """
    Base exception for all SDK-level failures.

    Args:
        message (str): Short explanation of the error.
        details (Any | None): Optional structured details (e.g., the offending response).
    """

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class ConfigError(ApiSDKError):
    """Required configuration is missing or invalid. Raised before any I/O."""


class PluginConflictError(ConfigError):
    """Two plugins were registered with the same priority."""


class TransportError(ApiSDKError):
    """Network or protocol failure reported by the underlying HTTP client."""


class AuthError(ApiSDKError):
    """An authentication strategy could not produce credentials."""


class ListenerError(ApiSDKError):
    """
    Base class for errors raised from event listeners.

    Client authors subclass this to turn HTTP statuses into typed errors
    from a post-request listener:

        class NotFoundError(ListenerError): ...

        def raise_on_status(request, response):
            if response.status_code == 404:
                raise NotFoundError("Resource not found.", details=response)
    """
