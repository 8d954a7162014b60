from ..auth import Authentication
from ..transport.base import Request
from ..transport.base import Response
from . import NextHandler
from . import Plugin


class AuthenticationPlugin(Plugin):
    """Apply an authentication strategy to every outgoing request."""

    def __init__(self, authentication: Authentication):
        self.authentication = authentication

    def handle_request(self, request: Request, next_: NextHandler) -> Response:
        return next_(self.authentication.authenticate(request))
