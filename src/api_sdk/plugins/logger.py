"""
Logging plugin for API SDK.

Logs every request that reaches the transport and the response it produced,
with timing information. Requests answered from the cache never reach this
plugin, since it sits inside the cache plugin.
"""

import time
import uuid

from ..logger import LoggerConfig
from ..transport.base import Request
from ..transport.base import Response
from . import NextHandler
from . import Plugin


class LoggerPlugin(Plugin):
    """Write formatted request/response pairs to the configured logger."""

    def __init__(self, config: LoggerConfig):
        self.config = config

    def handle_request(self, request: Request, next_: NextHandler) -> Response:
        logger = self.config.logger
        formatter = self.config.formatter
        uid = uuid.uuid4().hex

        logger.info(
            f"Sending request:\n{formatter.format_request(request)}",
            extra={"uid": uid},
        )

        start = time.monotonic()
        try:
            response = next_(request)
        except Exception as exc:
            logger.error(
                f"Error:\n{exc}\nwhen sending request:\n{formatter.format_request(request)}",
                extra={"uid": uid},
            )
            raise

        if self.config.log_responses:
            milliseconds = round((time.monotonic() - start) * 1000)
            logger.info(
                f"Received response:\n{formatter.format_response(response)}"
                f"\n\nin {milliseconds} ms",
                extra={"uid": uid, "milliseconds": milliseconds},
            )

        return response
