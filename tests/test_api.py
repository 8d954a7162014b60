"""
End-to-end tests for the Api request lifecycle.
"""

import json
import logging

import pytest

from api_sdk import Api
from api_sdk import ApiSettings
from api_sdk import BearerAuthentication
from api_sdk import CacheConfig
from api_sdk import ConfigError
from api_sdk import FileTokenStore
from api_sdk import ListenerError
from api_sdk import LoggerConfig
from api_sdk import MemoryCacheStore
from api_sdk import PluginConflictError
from api_sdk import PluginPriority
from api_sdk import RefreshTokenAuthentication
from api_sdk import TransportConfig
from api_sdk.plugins import Plugin
from tests.fakes import MockTransport
from tests.fakes import make_response

BASE_URL = "https://pokeapi.co/api/v2"


class NotFoundError(ListenerError):
    pass


class TagPlugin(Plugin):
    def __init__(self, value):
        self.value = value

    def handle_request(self, request, next_):
        return next_(request.with_header("X-Tag", self.value))


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def api(transport):
    client = Api(transport_config=TransportConfig(transport=transport), settings=ApiSettings(_env_file=None))
    client.set_base_url(BASE_URL)
    return client


class TestConfiguration:
    def test_missing_base_url_fails_before_io(self, transport):
        """
        GIVEN: an Api without base URL
        WHEN: a request is made
        THEN: ConfigError is raised and the transport is never called
        """
        api = Api(transport_config=TransportConfig(transport=transport), settings=ApiSettings(_env_file=None))

        with pytest.raises(ConfigError, match="A base URL must be set."):
            api.request("GET", "/pokemon/1")

        assert transport.request_count == 0

    def test_invalid_base_url(self, api):
        with pytest.raises(ConfigError, match="Invalid URL"):
            api.set_base_url("pokeapi")

        assert api.get_base_url() == BASE_URL

    def test_base_url_from_settings(self, transport):
        api = Api(
            transport_config=TransportConfig(transport=transport),
            settings=ApiSettings(base_url="https://example.com/api", _env_file=None),
        )

        api.request("GET", "/x")

        assert transport.last_request.url == "https://example.com/api/x"

    def test_default_transport_from_settings(self):
        api = Api(settings=ApiSettings(base_url=BASE_URL, transport="requests", _env_file=None))
        try:
            assert type(api.get_transport_config().transport).__name__ == "RequestsTransport"
        finally:
            api.close()

    def test_setters_chain(self, api):
        store = MemoryCacheStore()

        result = (
            api.add_query_default("limit", 20)
            .add_header_default("Accept", "application/json")
            .set_cache_config(CacheConfig(store=store))
        )

        assert result is api
        assert api.get_query_default("limit") == 20
        assert api.get_header_default("Accept") == "application/json"
        assert api.get_cache_config().store is store

    def test_enable_cache_uses_settings_ttl(self, transport):
        api = Api(
            transport_config=TransportConfig(transport=transport),
            settings=ApiSettings(base_url=BASE_URL, cache_ttl=300, _env_file=None),
        )

        api.enable_cache()

        config = api.get_cache_config()
        assert config.ttl == 300
        assert isinstance(config.store, MemoryCacheStore)

    def test_enable_refresh_token_auth_persists_to_settings_path(self, transport, tmp_path):
        token_path = tmp_path / "token.json"
        api = Api(
            transport_config=TransportConfig(transport=transport),
            settings=ApiSettings(base_url=BASE_URL, token_cache_path=token_path, _env_file=None),
        )

        api.enable_refresh_token_auth("https://auth.test/token", "refresh")

        auth = api.get_authentication()
        assert isinstance(auth, RefreshTokenAuthentication)
        assert isinstance(auth.token_store, FileTokenStore)
        assert auth.token_store.path == token_path

    def test_context_manager_closes_transport(self, api, transport):
        with api:
            pass

        assert transport.closed


class TestRequestBuilding:
    def test_path_and_slashes(self, api, transport):
        api.set_base_url("https://pokeapi.co/api/v2/")

        api.request("GET", "//pokemon///1")

        assert transport.last_request.url == "https://pokeapi.co/api/v2/pokemon/1"

    def test_query_defaults_merged_with_request_winning(self, api, transport):
        api.add_query_default("limit", 20).add_query_default("lang", "en")

        api.request("GET", "/pokemon", query={"limit": 5, "offset": 10})

        assert transport.last_request.url == f"{BASE_URL}/pokemon?limit=5&lang=en&offset=10"

    def test_query_appended_to_existing_query(self, api, transport):
        api.request("GET", "/pokemon?sort=name", query={"limit": 1})

        assert transport.last_request.url == f"{BASE_URL}/pokemon?sort=name&limit=1"

    def test_removed_query_default(self, api, transport):
        api.add_query_default("limit", 20).remove_query_default("limit")

        api.request("GET", "/pokemon")

        assert transport.last_request.url == f"{BASE_URL}/pokemon"

    def test_header_defaults_merged_with_request_winning(self, api, transport):
        api.add_header_default("Accept", "text/html").add_header_default("X-Client", "sdk")

        api.request("GET", "/pokemon", headers={"accept": "application/json"})

        sent = transport.last_request
        assert sent.get_header("Accept") == "application/json"
        assert sent.get_header("X-Client") == "sdk"
        assert len([name for name in sent.headers if name.lower() == "accept"]) == 1

    def test_string_body_gets_content_headers(self, api, transport):
        api.request("POST", "/pokemon", body='{"name": "mew"}')

        sent = transport.last_request
        assert sent.read_body() == b'{"name": "mew"}'
        assert sent.get_header("Content-Type") == "application/json"
        assert sent.get_header("Content-Length") == "15"

    def test_build_path(self, api):
        assert api.build_path("/pokemon/{id}/encounters", {"id": 25}) == "/pokemon/25/encounters"


class TestPlugins:
    def test_authentication_applied(self, api, transport):
        api.set_authentication(BearerAuthentication("secret"))

        api.request("GET", "/pokemon/1")

        assert transport.last_request.get_header("Authorization") == "Bearer secret"

    def test_cached_request_hits_transport_once(self, api, transport, caplog):
        """
        GIVEN: cache and logger configured
        WHEN: the same GET is made twice
        THEN: the transport is called once and the second call logs a cache hit
        """
        transport.handler = lambda r: make_response(200, b'{"id": 1}')
        api.set_cache_config(CacheConfig(store=MemoryCacheStore()))
        api.set_logger_config(LoggerConfig(logger=logging.getLogger("tests.api")))

        with caplog.at_level(logging.INFO, logger="tests.api"):
            first = api.request("GET", "/pokemon/1")
            second = api.request("GET", "/pokemon/1")

        assert first == second == '{"id": 1}'
        assert transport.request_count == 1
        hits = [r for r in caplog.records if r.getMessage().startswith("Cache hit:")]
        assert len(hits) == 1

    def test_default_chain_order(self, api):
        api.set_authentication(BearerAuthentication("t"))
        api.set_cache_config(CacheConfig(store=MemoryCacheStore()))
        api.set_logger_config(LoggerConfig(logger=logging.getLogger("tests.api")))
        api.add_plugin(TagPlugin("x"), 50)

        chain = api.build_plugin_chain()

        assert chain.priorities == [50, 40, 32, 24, 16, 8]

    def test_minimal_chain(self, api):
        assert api.build_plugin_chain().priorities == [
            PluginPriority.CONTENT_TYPE,
            PluginPriority.CONTENT_LENGTH,
        ]

    def test_custom_plugin(self, api, transport):
        api.add_plugin(TagPlugin("custom"), 100)

        api.request("GET", "/pokemon/1")

        assert transport.last_request.get_header("X-Tag") == "custom"

    def test_custom_plugin_duplicate_priority(self, api):
        api.add_plugin(TagPlugin("a"), 100)

        with pytest.raises(PluginConflictError, match="A plugin with priority 100 already exists."):
            api.add_plugin(TagPlugin("b"), 100)

    def test_custom_plugin_reserved_priority(self, api):
        with pytest.raises(PluginConflictError, match="reserved for the cache plugin"):
            api.add_plugin(TagPlugin("a"), 16)

    def test_removed_plugin_not_applied(self, api, transport):
        api.add_plugin(TagPlugin("gone"), 100).remove_plugin(100)

        api.request("GET", "/pokemon/1")

        assert not transport.last_request.has_header("X-Tag")


class TestListeners:
    def test_pre_request_rewrite_reaches_transport(self, api, transport):
        api.add_pre_request_listener(lambda r: r.with_header("X-Trace", "abc"))

        api.request("GET", "/pokemon/1")

        assert transport.last_request.get_header("X-Trace") == "abc"

    def test_post_request_error_propagates(self, api, transport):
        """
        GIVEN: a post-request listener raising on 404
        WHEN: the server answers 404
        THEN: the listener's error reaches the caller and no contents listener runs
        """
        transport.handler = lambda r: make_response(404, b"Not Found")
        contents_calls = []
        error = NotFoundError("Resource not found.")

        def raise_on_status(request, response):
            if response.status_code == 404:
                raise error

        api.add_post_request_listener(raise_on_status)
        api.add_response_contents_listener(contents_calls.append)

        with pytest.raises(NotFoundError) as exc_info:
            api.request("GET", "/pokemon/unknown")

        assert exc_info.value is error
        assert contents_calls == []

    def test_post_request_replaces_response(self, api):
        api.add_post_request_listener(lambda req, resp: make_response(200, b"replaced"))

        assert api.request("GET", "/pokemon/1") == "replaced"

    def test_contents_listener_decodes_json(self, api, transport):
        transport.handler = lambda r: make_response(200, b'{"name": "bulbasaur", "id": 1}')
        api.add_response_contents_listener(json.loads)

        assert api.request("GET", "/pokemon/1") == {"name": "bulbasaur", "id": 1}

    def test_listener_priorities(self, api):
        api.add_response_contents_listener(lambda c: c + "-low", priority=-1)
        api.add_response_contents_listener(lambda c: c + "-high", priority=5)

        assert api.request("GET", "/pokemon/1") == "OK-high-low"

    def test_body_read_by_listener_still_returned(self, api):
        api.add_post_request_listener(lambda req, resp: resp.stream.read() and None)

        assert api.request("GET", "/pokemon/1") == "OK"


def test_unknown_response_charset_decodes_as_utf8(api, transport):
    transport.handler = lambda r: make_response(
        200, b"hello", {"Content-Type": "text/plain; charset=x-bogus"}
    )

    assert api.request("GET", "/a") == "hello"
