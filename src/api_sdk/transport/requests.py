import io

import requests

from ..exceptions import TransportError
from .base import BaseTransport
from .base import Request
from .base import Response


class RequestsTransport(BaseTransport):
    """
    Transport implementation using requests.Session.

    Note: This is a compatibility layer for projects that already depend on
    requests. httpx is the default and recommended transport.
    """

    def __init__(self, timeout: float = 30.0, session: requests.Session | None = None):
        self._timeout = timeout
        self._session = session or requests.Session()

    def send_request(self, request: Request) -> Response:
        data = request.read_body()
        if data is None and request.body is not None:
            data = request.body

        try:
            response = self._session.request(
                method=request.method,
                url=request.url,
                headers=request.headers,
                data=data,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc

        return Response(
            status_code=response.status_code,
            headers=dict(response.headers),
            stream=io.BytesIO(response.content),
            reason_phrase=response.reason,
        )

    def close(self):
        self._session.close()
