"""
Request lifecycle events.

Three fixed stages let client code observe and replace values while a
request is in flight:

- PRE_REQUEST: ``handler(request) -> request``, before the request is sent
- POST_REQUEST: ``handler(request, response) -> response``, after the response
  arrives; the usual place to raise typed errors for HTTP error statuses
- RESPONSE_CONTENTS: ``handler(contents) -> contents``, transforms the decoded
  body (e.g. JSON-decodes it); the final value is what ``request()`` returns

Each handler receives the value left by the previous one and returns the next
value. Returning None keeps the current value. Handlers run from the highest
priority to the lowest; handlers sharing a priority run in registration order.
Any exception raised by a handler propagates unchanged and stops the call.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Any

from .transport.base import Request
from .transport.base import Response

PreRequestHandler = Callable[[Request], Request | None]
PostRequestHandler = Callable[[Request, Response], Response | None]
ResponseContentsHandler = Callable[[Any], Any]


class Stage(str, Enum):
    PRE_REQUEST = "pre_request"
    POST_REQUEST = "post_request"
    RESPONSE_CONTENTS = "response_contents"


@dataclass(frozen=True)
class ListenerRegistration:
    handler: Callable[..., Any]
    priority: int
    sequence: int


class EventPipeline:
    """Priority-ordered listener lists for the three request stages."""

    def __init__(self):
        self._listeners: dict[Stage, list[ListenerRegistration]] = {
            stage: [] for stage in Stage
        }
        self._sequence = count()

    def add_listener(
        self, stage: Stage, handler: Callable[..., Any], priority: int = 0
    ) -> "EventPipeline":
        registrations = self._listeners[Stage(stage)]
        registrations.append(
            ListenerRegistration(handler, priority, next(self._sequence))
        )
        registrations.sort(key=lambda r: (-r.priority, r.sequence))
        return self

    def remove_listener(self, stage: Stage, handler: Callable[..., Any]) -> "EventPipeline":
        """Remove every registration of *handler* from *stage*."""
        stage = Stage(stage)
        self._listeners[stage] = [
            r for r in self._listeners[stage] if r.handler != handler
        ]
        return self

    def get_listeners(self, stage: Stage) -> list[Callable[..., Any]]:
        """Handlers of *stage* in execution order."""
        return [r.handler for r in self._listeners[Stage(stage)]]

    def has_listeners(self, stage: Stage) -> bool:
        return bool(self._listeners[Stage(stage)])

    def dispatch_pre_request(self, request: Request) -> Request:
        for registration in list(self._listeners[Stage.PRE_REQUEST]):
            result = registration.handler(request)
            if result is not None:
                request = result
        return request

    def dispatch_post_request(self, request: Request, response: Response) -> Response:
        for registration in list(self._listeners[Stage.POST_REQUEST]):
            result = registration.handler(request, response)
            if result is not None:
                response = result
        return response

    def dispatch_response_contents(self, contents: Any) -> Any:
        for registration in list(self._listeners[Stage.RESPONSE_CONTENTS]):
            result = registration.handler(contents)
            if result is not None:
                contents = result
        return contents
