import codecs
import io
import json
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from http import HTTPStatus
from typing import Any
from typing import BinaryIO
from typing import Union
from urllib.parse import urlencode
from urllib.parse import urlsplit
from urllib.parse import urlunsplit

Body = Union[bytes, BinaryIO]


def find_header(headers: Mapping[str, str], name: str) -> str | None:
    """Return the stored header name matching *name* case-insensitively."""
    lowered = name.lower()
    for key in headers:
        if key.lower() == lowered:
            return key
    return None


def encode_query(params: Mapping[str, Any]) -> str:
    """
    Encode query parameters the way httpx does: booleans become
    ``true``/``false``, ``None`` becomes an empty value and sequences
    repeat the key.
    """

    def primitive(value: Any) -> str:
        if value is True:
            return "true"
        if value is False:
            return "false"
        if value is None:
            return ""
        return str(value)

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, primitive(item)) for item in value)
        else:
            pairs.append((key, primitive(value)))
    return urlencode(pairs)


@dataclass(frozen=True, eq=False)
class Request:
    """
    Outgoing HTTP request.

    Requests are values: every ``with_*`` method returns a modified copy, so a
    plugin or listener never changes a request another component still holds.
    Headers and body are mutable containers, so requests compare and hash by
    identity.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Body | None = None
    protocol_version: str = "1.1"

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", dict(self.headers))

    def get_header(self, name: str, default: str | None = None) -> str | None:
        key = find_header(self.headers, name)
        return self.headers[key] if key is not None else default

    def has_header(self, name: str) -> bool:
        return find_header(self.headers, name) is not None

    def with_header(self, name: str, value: str) -> "Request":
        headers = dict(self.headers)
        existing = find_header(headers, name)
        if existing is not None:
            del headers[existing]
        headers[name] = value
        return replace(self, headers=headers)

    def with_headers(self, headers: Mapping[str, str]) -> "Request":
        request = self
        for name, value in headers.items():
            request = request.with_header(name, value)
        return request

    def without_header(self, name: str) -> "Request":
        existing = find_header(self.headers, name)
        if existing is None:
            return self
        headers = dict(self.headers)
        del headers[existing]
        return replace(self, headers=headers)

    def with_query_params(self, params: Mapping[str, Any]) -> "Request":
        if not params:
            return self
        parts = urlsplit(self.url)
        extra = encode_query(params)
        query = f"{parts.query}&{extra}" if parts.query else extra
        return replace(self, url=urlunsplit(parts._replace(query=query)))

    def with_body(self, body: Body | None) -> "Request":
        return replace(self, body=body)

    def read_body(self) -> bytes | None:
        """
        Return the body as bytes without consuming it.

        Seekable streams are read from the start and left where they were.
        Returns None for an empty request or a stream that cannot be rewound.
        """
        if self.body is None or isinstance(self.body, bytes):
            return self.body
        if not self.body.seekable():
            return None
        position = self.body.tell()
        self.body.seek(0)
        data = self.body.read()
        self.body.seek(position)
        return data

    def body_size(self) -> int | None:
        if self.body is None:
            return 0
        data = self.read_body()
        return len(data) if data is not None else None


class Response:
    """
    Unified response wrapper that hides differences between HTTP clients.
    Provides a consistent interface regardless of the underlying transport.
    """

    def __init__(
        self,
        status_code: int,
        headers: Mapping[str, str] | None = None,
        stream: BinaryIO | None = None,
        reason_phrase: str | None = None,
        protocol_version: str = "1.1",
    ):
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.stream = stream if stream is not None else io.BytesIO()
        self.protocol_version = protocol_version
        if reason_phrase is None:
            try:
                reason_phrase = HTTPStatus(status_code).phrase
            except ValueError:
                reason_phrase = ""
        self.reason_phrase = reason_phrase

    def get_header(self, name: str, default: str | None = None) -> str | None:
        key = find_header(self.headers, name)
        return self.headers[key] if key is not None else default

    @property
    def content(self) -> bytes:
        """Raw body. The stream is rewound first since listeners may have read it."""
        self.stream.seek(0)
        return self.stream.read()

    @property
    def charset(self) -> str:
        content_type = self.get_header("Content-Type") or ""
        for param in content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                charset = value.strip('"')
                try:
                    codecs.lookup(charset)
                except LookupError:
                    # unknown codec names fall back to the default
                    return "utf-8"
                return charset
        return "utf-8"

    def get_contents(self) -> str:
        return self.content.decode(self.charset, errors="replace")

    @property
    def text(self) -> str:
        return self.get_contents()

    def json(self) -> Any:
        return json.loads(self.get_contents())

    def __repr__(self) -> str:
        return f"<Response [{self.status_code} {self.reason_phrase}]>"


class BaseTransport:
    """
    Abstract transport layer interface for API SDK.
    All HTTP client backends should inherit from this class.

    Supported transports:
    - httpx: httpx.Client (default)
    - requests: requests.Session
    """

    def send_request(self, request: Request) -> Response:
        """
        Send the request and return the unified response.
        Override this method in transport implementations.

        Raises:
            TransportError: On network or protocol failure.
        """
        raise NotImplementedError(
            "Transport implementations must override this method."
        )

    def close(self):
        """Release connections held by the underlying client."""
