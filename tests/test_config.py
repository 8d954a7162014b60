from pathlib import Path

from api_sdk.config import ApiSettings


def test_api_settings_env(monkeypatch):
    # Set environment variables to test values
    monkeypatch.setenv("API_SDK_BASE_URL", "https://pokeapi.co/api/v2")
    monkeypatch.setenv("API_SDK_TIMEOUT", "15")
    monkeypatch.setenv("API_SDK_TRANSPORT", "requests")
    monkeypatch.setenv("API_SDK_CACHE_TTL", "120")

    settings = ApiSettings()
    assert settings.base_url == "https://pokeapi.co/api/v2"
    assert settings.timeout == 15
    assert settings.transport == "requests"
    assert settings.cache_ttl == 120


def test_api_settings_defaults(monkeypatch, tmp_path):
    # keep a developer's .env out of the test
    monkeypatch.chdir(tmp_path)
    for name in ("BASE_URL", "TIMEOUT", "TRANSPORT", "CACHE_TTL", "TOKEN_CACHE_PATH"):
        monkeypatch.delenv(f"API_SDK_{name}", raising=False)

    settings = ApiSettings()
    assert settings.base_url is None
    assert settings.timeout == 30.0
    assert settings.transport == "httpx"
    assert settings.cache_ttl == 60
    assert settings.token_cache_path == Path.home() / ".api_sdk" / "token_cache.json"


def test_api_settings_explicit_values_win(monkeypatch):
    monkeypatch.setenv("API_SDK_TIMEOUT", "15")

    settings = ApiSettings(timeout=5.0)
    assert settings.timeout == 5.0
