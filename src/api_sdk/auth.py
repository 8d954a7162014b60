"""
Authentication strategies for the API SDK.

An authentication strategy receives the outgoing request and returns a copy
carrying credentials. Exactly one strategy is active per `Api` instance;
combine several with ChainAuthentication.

Available strategies:
- BearerAuthentication: `Authorization: Bearer <token>`
- BasicAuthentication: `Authorization: Basic <base64(user:password)>`
- HeaderAuthentication: API key in an arbitrary header
- QueryParamAuthentication: credentials appended to the query string
- ChainAuthentication: applies several strategies in order
- RefreshTokenAuthentication: exchanges a refresh token for short-lived
  access tokens, refreshing them when they expire
"""

import base64
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .exceptions import AuthError
from .token_store import MemoryTokenStore
from .token_store import TokenStore
from .transport.base import Request

logger = logging.getLogger("api_sdk.auth")


class Authentication(ABC):
    """Base class for authentication strategies."""

    @abstractmethod
    def authenticate(self, request: Request) -> Request:
        """Return *request* with credentials added."""


class BearerAuthentication(Authentication):
    def __init__(self, token: str):
        self.token = token

    def authenticate(self, request: Request) -> Request:
        return request.with_header("Authorization", f"Bearer {self.token}")


class BasicAuthentication(Authentication):
    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def authenticate(self, request: Request) -> Request:
        credentials = f"{self.username}:{self.password}".encode()
        encoded = base64.b64encode(credentials).decode("ascii")
        return request.with_header("Authorization", f"Basic {encoded}")


class HeaderAuthentication(Authentication):
    """API key sent in a header, e.g. ``X-API-Key``."""

    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value

    def authenticate(self, request: Request) -> Request:
        return request.with_header(self.name, self.value)


class QueryParamAuthentication(Authentication):
    """Credentials appended to the query string, e.g. ``?appid=...``."""

    def __init__(self, params: Mapping[str, Any]):
        self.params = dict(params)

    def authenticate(self, request: Request) -> Request:
        return request.with_query_params(self.params)


class ChainAuthentication(Authentication):
    def __init__(self, authentications: list[Authentication]):
        self.authentications = list(authentications)

    def authenticate(self, request: Request) -> Request:
        for authentication in self.authentications:
            request = authentication.authenticate(request)
        return request


class RefreshTokenAuthentication(Authentication):
    """
    Manages automatic retrieval and refreshing of access tokens using a refresh token.

    The token endpoint is called with the refresh token in ``header_name``; it must
    answer with JSON carrying ``access_token`` and, optionally, ``expires_in``
    (seconds). Transient network failures on the token endpoint are retried with
    exponential backoff. Tokens are reused from memory, then from the token store,
    and only refreshed when missing or about to expire.

    Attributes:
        token_url (str): Absolute URL of the token endpoint.
        refresh_token (str): The OAuth2 refresh token.
        header_name (str): Header carrying tokens, both to the token endpoint
            and on authenticated requests.
        _access_token (Optional[str]): The currently active access token.
        _token_expiry (float): UNIX timestamp when the current access token expires.
        _retry_attempts (int): Maximum number of attempts on the token endpoint.
    """

    EXPIRY_MARGIN = 10
    DEFAULT_EXPIRES_IN = 5 * 60

    def __init__(
        self,
        token_url: str,
        refresh_token: str,
        header_name: str = "Authorization",
        token_prefix: str = "Bearer ",
        retry_attempts: int = 3,
        token_store: Optional[TokenStore] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.token_url = token_url
        self.refresh_token = refresh_token
        self.header_name = header_name
        self.token_prefix = token_prefix
        self.token_store = token_store or MemoryTokenStore()
        self._http_client = http_client
        self._access_token: Optional[str] = None
        self._token_expiry: float = 0
        self._retry_attempts = retry_attempts

    def authenticate(self, request: Request) -> Request:
        token = self.get_access_token()
        return request.with_header(self.header_name, f"{self.token_prefix}{token}")

    def is_token_expired(self) -> bool:
        """True if the token is missing or about to expire."""
        return not self._access_token or (
            time.time() > self._token_expiry - self.EXPIRY_MARGIN
        )

    def get_access_token(self) -> str:
        """
        Returns a valid access token. Refreshes it only if it's expired or missing.
        """
        if not self._access_token:
            token_data = self.token_store.load()
            if token_data:
                logger.debug("Loaded access token from token store")
                self._access_token = token_data["access_token"]
                self._token_expiry = token_data["expires_at"]

        if not self.is_token_expired():
            return self._access_token

        logger.debug("No valid token. Refreshing...")
        return self.refresh()

    def refresh(self) -> str:
        if not self.refresh_token or not self.refresh_token.strip():
            raise AuthError("Refresh token is missing or empty")

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=0.5, min=1, max=5),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = self._post_refresh_token()
        except httpx.TransportError as exc:
            raise AuthError(f"Token endpoint unreachable: {exc}") from exc

        if response.status_code == 401:
            logger.error("Refresh token is invalid.")
            raise AuthError("Bad refresh token")
        if not response.is_success:
            logger.error(f"Auth error: {response.status_code} {response.text}")
            raise AuthError(
                f"Auth error: {response.status_code}: {response.text}",
                details=response.text,
            )

        try:
            data = response.json()
            access_token = data["access_token"]
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthError("Token endpoint returned no access_token") from exc

        try:
            expires_in = float(data.get("expires_in", self.DEFAULT_EXPIRES_IN))
        except (ValueError, TypeError) as exc:
            raise AuthError(
                f"Token endpoint returned invalid expires_in: {data.get('expires_in')!r}"
            ) from exc

        self._access_token = access_token
        self._token_expiry = time.time() + expires_in
        logger.debug("New access token acquired")

        try:
            self.token_store.save(self._access_token, self._token_expiry)
        except Exception as e:
            logger.warning(f"Failed to save token: {e}")

        return self._access_token

    def _post_refresh_token(self) -> httpx.Response:
        headers = {self.header_name: f"{self.token_prefix}{self.refresh_token}"}
        if self._http_client is not None:
            return self._http_client.post(self.token_url, headers=headers)
        with httpx.Client(timeout=30.0) as client:
            return client.post(self.token_url, headers=headers)
