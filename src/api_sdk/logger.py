"""
Request/response logging configuration for API SDK.

This module provides LoggerConfig, which tells the SDK where to write
request/response log entries and how to render HTTP messages, plus the two
built-in message formatters:

- SimpleFormatter: one line per message ("GET https://... 1.1")
- FullHttpMessageFormatter: start line, headers and a truncated body

Any object with `format_request` and `format_response` methods can be
used as a formatter.
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Protocol

from .transport.base import Request
from .transport.base import Response


class Formatter(Protocol):
    def format_request(self, request: Request) -> str:
        """Render a request for a log message."""

    def format_response(self, response: Response) -> str:
        """Render a response for a log message."""


class SimpleFormatter:
    def format_request(self, request: Request) -> str:
        return f"{request.method} {request.url} {request.protocol_version}"

    def format_response(self, response: Response) -> str:
        return (
            f"{response.status_code} {response.reason_phrase} "
            f"{response.protocol_version}"
        )


class FullHttpMessageFormatter:
    """
    Render complete HTTP messages.

    Args:
        max_body_length: Bodies are cut after this many characters;
            None keeps the whole body.
    """

    def __init__(self, max_body_length: int | None = 1000):
        self.max_body_length = max_body_length

    def format_request(self, request: Request) -> str:
        start = f"{request.method} {request.url} HTTP/{request.protocol_version}"
        body = request.read_body()
        if body is None and request.body is not None:
            text = "[streamed body]"
        else:
            text = (body or b"").decode("utf-8", errors="replace")
        return self._format(start, request.headers, text)

    def format_response(self, response: Response) -> str:
        start = (
            f"HTTP/{response.protocol_version} {response.status_code} "
            f"{response.reason_phrase}"
        )
        return self._format(start, response.headers, response.get_contents())

    def _format(self, start: str, headers: dict[str, str], body: str) -> str:
        lines = [start]
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        if self.max_body_length is not None:
            body = body[: self.max_body_length]
        return "\n".join(lines) + "\n\n" + body


@dataclass
class LoggerConfig:
    """
    Where and how request/response pairs are logged.

    Attributes:
        logger: Destination logger; entries are written at INFO level,
            transport failures at ERROR level.
        formatter: Renders requests and responses.
        log_responses: Also write one entry per received response.
    """

    logger: logging.Logger
    formatter: Formatter = field(default_factory=SimpleFormatter)
    log_responses: bool = True
