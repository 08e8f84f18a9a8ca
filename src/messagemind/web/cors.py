"""CORS policy and the middleware that enforces it."""

from dataclasses import dataclass

from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from messagemind.config import Config

DEFAULT_ORIGINS = (
    "http://localhost:8080",
    "http://localhost:5173",
    "http://[::1]:8080",
    "http://[::1]:5173",
    "https://messagemindapp.vercel.app",
)
ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "Authorization", "Idempotency-Key")


@dataclass(frozen=True)
class CorsPolicy:
    origins: tuple[str, ...]
    allow_credentials: bool = True
    methods: tuple[str, ...] = ALLOWED_METHODS
    headers: tuple[str, ...] = ALLOWED_HEADERS

    @classmethod
    def from_config(cls, config: Config) -> "CorsPolicy":
        """Frontend URL first, then the built-in origins, then configured extras; duplicates dropped."""
        candidates = [config.frontend_url, *DEFAULT_ORIGINS, *config.cors_origins]
        return cls(origins=tuple(dict.fromkeys(origin.rstrip("/") for origin in candidates if origin)))


class CredentialedCORSMiddleware(CORSMiddleware):
    """Starlette CORS middleware that withholds the credentials header from unknown origins.

    Starlette sends ``Access-Control-Allow-Credentials`` on every response that
    carries an ``Origin`` header. Only allowed origins may receive it here.
    """

    def __init__(self, app: ASGIApp, policy: CorsPolicy) -> None:
        super().__init__(
            app,
            allow_origins=list(policy.origins),
            allow_methods=list(policy.methods),
            allow_headers=list(policy.headers),
            allow_credentials=policy.allow_credentials,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await super().__call__(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if origin is None or self.is_allowed_origin(origin=origin):
            await super().__call__(scope, receive, send)
            return

        async def send_without_credentials(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                if "access-control-allow-credentials" in headers:
                    del headers["access-control-allow-credentials"]
            await send(message)

        await super().__call__(scope, receive, send_without_credentials)
