"""
Example API client built on API SDK.

This example shows how a client author turns the Api base class into a small
typed client for the public PokeAPI: base URL, JSON decoding, typed errors
from status codes, caching and request logging.
"""

import json
import logging
from pathlib import Path

from api_sdk import Api
from api_sdk import DiskCacheStore
from api_sdk import ListenerError
from api_sdk import LoggerConfig

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class PokeApiError(ListenerError):
    """Any non-successful answer from PokeAPI."""


class PokemonNotFoundError(PokeApiError):
    pass


class PokeApi(Api):
    def __init__(self, cache_dir: Path | None = None):
        super().__init__()
        self.set_base_url("https://pokeapi.co/api/v2")
        self.add_header_default("Accept", "application/json")
        self.set_logger_config(LoggerConfig(logger=logging.getLogger("pokeapi")))
        self.enable_cache(DiskCacheStore(cache_dir) if cache_dir else None)

        self.add_post_request_listener(self._raise_on_status)
        self.add_response_contents_listener(json.loads)

    def get_pokemon(self, name: str) -> dict:
        return self.request("GET", self.build_path("/pokemon/{name}", {"name": name}))

    def list_pokemon(self, limit: int = 20, offset: int = 0) -> dict:
        return self.request("GET", "/pokemon", query={"limit": limit, "offset": offset})

    @staticmethod
    def _raise_on_status(request, response):
        if response.status_code == 404:
            raise PokemonNotFoundError(f"{request.url} not found", details=response)
        if response.status_code >= 400:
            raise PokeApiError(
                f"PokeAPI answered {response.status_code}", details=response
            )


def main():
    with PokeApi(cache_dir=Path.home() / ".cache" / "pokeapi") as api:
        pikachu = api.get_pokemon("pikachu")
        logger.info(f"{pikachu['name']} weighs {pikachu['weight']}")

        # served from the cache, no network traffic
        api.get_pokemon("pikachu")

        first_page = api.list_pokemon(limit=5)
        logger.info(", ".join(p["name"] for p in first_page["results"]))

        try:
            api.get_pokemon("missingno")
        except PokemonNotFoundError as e:
            logger.info(f"Expected failure: {e}")


if __name__ == "__main__":
    main()
