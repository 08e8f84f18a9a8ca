"""Terminal fault handler stage."""

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from messagemind.errors import ApiError
from messagemind.web.error_handlers import api_error_response, internal_error_response

logger = structlog.get_logger(__name__)


class FaultHandlerMiddleware:
    """Turns any exception escaping the downstream stages into a JSON response.

    Faults are always logged with full detail. The client only sees the fault
    message when ``expose_details`` is set. ``ApiError``s raised by the body
    stages keep their own status (400 malformed body, 413 too large); every
    other exception becomes a 500. If the response has already started the
    fault is re-raised to the server, which closes the connection.
    """

    def __init__(self, app: ASGIApp, expose_details: bool) -> None:
        self.app = app
        self.expose_details = expose_details

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except ApiError as exc:
            if response_started:
                raise
            logger.info("api_error", kind=exc.kind.value, message=exc.message, path=scope["path"])
            await api_error_response(exc)(scope, receive, send)
        except Exception as exc:
            logger.exception("unhandled_error", method=scope["method"], path=scope["path"])
            if response_started:
                raise
            await internal_error_response(exc, self.expose_details)(scope, receive, send)
