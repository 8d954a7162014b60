import re
from collections.abc import Mapping
from typing import Any

from pydantic import AnyHttpUrl
from pydantic import TypeAdapter
from pydantic import ValidationError

from .exceptions import ConfigError
from .transport.base import find_header

_DUPLICATE_SLASHES = re.compile(r"(^|[^:])//+")
_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


def reduce_duplicate_slashes(value: str) -> str:
    """Collapse runs of slashes into one, leaving the ``://`` scheme separator alone."""
    return _DUPLICATE_SLASHES.sub(r"\1/", value)


def build_path(template: str, parameters: Mapping[str, Any]) -> str:
    """
    Substitute ``{name}`` placeholders in *template*.

    Example:
        build_path("/pokemon/{id}", {"id": 25})  # "/pokemon/25"
    """
    for name, value in parameters.items():
        template = template.replace(f"{{{name}}}", str(value))
    return template


def validate_url(url: str) -> str:
    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError as exc:
        raise ConfigError(f"Invalid URL: {url!r}", details=exc.errors()) from exc
    return url


def merge_headers(defaults: Mapping[str, str], headers: Mapping[str, str]) -> dict[str, str]:
    """Merge *headers* over *defaults*, matching names case-insensitively."""
    merged = dict(defaults)
    for name, value in headers.items():
        existing = find_header(merged, name)
        if existing is not None:
            del merged[existing]
        merged[name] = value
    return merged
