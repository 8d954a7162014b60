import io

import httpx

from ..exceptions import TransportError
from .base import BaseTransport
from .base import Request
from .base import Response


class HttpxTransport(BaseTransport):
    """
    Transport implementation using httpx.Client.
    """

    def __init__(self, timeout: float = 30.0, client: httpx.Client | None = None):
        self._timeout = timeout
        self._client = client or httpx.Client(timeout=self._timeout)

    def send_request(self, request: Request) -> Response:
        content = request.read_body()
        if content is None and request.body is not None:
            # non-seekable stream, let httpx iterate it
            content = request.body

        try:
            response = self._client.request(
                method=request.method,
                url=request.url,
                headers=request.headers,
                content=content,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc

        return Response(
            status_code=response.status_code,
            headers=dict(response.headers),
            stream=io.BytesIO(response.content),
            reason_phrase=response.reason_phrase,
            protocol_version=response.http_version.replace("HTTP/", ""),
        )

    def close(self):
        self._client.close()
