"""
Plugins that help servers understand the request body.

- ContentTypePlugin detects JSON and XML bodies and sets Content-Type
- ContentLengthPlugin sets Content-Length, or chunked transfer encoding
  when the body size cannot be known up front
"""

import json
from xml.etree import ElementTree

from ..transport.base import Request
from ..transport.base import Response
from . import NextHandler
from . import Plugin


class ContentTypePlugin(Plugin):
    """
    Set the Content-Type header when the caller did not.

    Args:
        skip_detection: Never inspect the body.
        size_limit: Bodies larger than this many bytes are not inspected.
    """

    def __init__(self, skip_detection: bool = False, size_limit: int = 16_000_000):
        self.skip_detection = skip_detection
        self.size_limit = size_limit

    def handle_request(self, request: Request, next_: NextHandler) -> Response:
        if self.skip_detection or request.has_header("Content-Type"):
            return next_(request)

        size = request.body_size()
        if not size or size > self.size_limit:
            return next_(request)

        body = request.read_body()
        if self._is_json(body):
            request = request.with_header("Content-Type", "application/json")
        elif self._is_xml(body):
            request = request.with_header("Content-Type", "application/xml")

        return next_(request)

    @staticmethod
    def _is_json(body: bytes) -> bool:
        try:
            json.loads(body)
        except ValueError:
            return False
        return True

    @staticmethod
    def _is_xml(body: bytes) -> bool:
        try:
            ElementTree.fromstring(body)
        except ElementTree.ParseError:
            return False
        return True


class ContentLengthPlugin(Plugin):
    """Set Content-Length from the body, or fall back to chunked encoding."""

    def handle_request(self, request: Request, next_: NextHandler) -> Response:
        if request.has_header("Content-Length") or request.body is None:
            return next_(request)

        size = request.body_size()
        if size is None:
            request = request.with_header("Transfer-Encoding", "chunked")
        else:
            request = request.with_header("Content-Length", str(size))

        return next_(request)
