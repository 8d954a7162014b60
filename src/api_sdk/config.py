"""
Configuration management for API SDK.

This module provides the ApiSettings class that holds the defaults an `Api`
instance starts from, with support for environment variables, .env files,
and sensible defaults.

Environment variables are automatically loaded with API_SDK_ prefix.
Example: API_SDK_BASE_URL=https://pokeapi.co/api/v2
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class ApiSettings(BaseSettings):
    """
    Configuration settings for API SDK with environment variable support.

    This class automatically loads configuration from:
    - Environment variables (with API_SDK_ prefix)
    - .env files
    - Default values for optional settings

    Example:
        # From environment
        export API_SDK_BASE_URL=https://pokeapi.co/api/v2
        export API_SDK_TIMEOUT=60.0

        # In code
        settings = ApiSettings()
    """

    base_url: str | None = None
    timeout: float = 30.0
    transport: str = "httpx"  # default, can be 'requests'
    cache_ttl: int | None = 60
    token_cache_path: Path = Field(
        default=Path.home() / ".api_sdk" / "token_cache.json"
    )

    model_config = SettingsConfigDict(
        env_prefix="API_SDK_", env_file=".env", extra="ignore"
    )
