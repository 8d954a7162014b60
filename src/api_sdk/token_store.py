"""
Access token persistence for RefreshTokenAuthentication.

- MemoryTokenStore: keeps the token for the lifetime of the process
- FileTokenStore: keeps it in a JSON file so later processes can reuse it
"""

import logging
import os
import time
from pathlib import Path

from pydantic import BaseModel
from pydantic import ValidationError

logger = logging.getLogger("api_sdk.token_store")


class StoredToken(BaseModel):
    access_token: str
    expires_at: float

    def is_valid(self) -> bool:
        return time.time() < self.expires_at


class TokenStore:
    """Abstract interface for token storage."""

    def load(self) -> dict | None:
        """Return ``{"access_token": ..., "expires_at": ...}`` or None if nothing valid is stored."""
        raise NotImplementedError

    def save(self, access_token: str, expires_at: float):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    def __init__(self):
        self._token: StoredToken | None = None

    def load(self) -> dict | None:
        if self._token is not None and self._token.is_valid():
            return self._token.model_dump()
        return None

    def save(self, access_token: str, expires_at: float):
        self._token = StoredToken(access_token=access_token, expires_at=expires_at)

    def clear(self):
        self._token = None


class FileTokenStore(TokenStore):
    """
    JSON file token store.

    Unreadable or malformed files count as empty. The file is replaced
    atomically on save so a concurrent reader never sees half a token.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> dict | None:
        try:
            token = StoredToken.model_validate_json(self.path.read_text())
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as e:
            logger.debug(f"Ignoring token file {self.path}: {e}")
            return None

        if not token.is_valid():
            logger.debug("Stored token is expired")
            return None
        return token.model_dump()

    def save(self, access_token: str, expires_at: float):
        token = StoredToken(access_token=access_token, expires_at=expires_at)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(token.model_dump_json())
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning(f"Failed to save token to {self.path}: {e}")

    def clear(self):
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to clear token file {self.path}: {e}")
