from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from messagemind.app import App
from messagemind.config import Config
from messagemind.errors import ApiError
from messagemind.web.error_handlers import api_error_handler
from messagemind.web.openapi import set_custom_openapi
from messagemind.web.paths import API_PREFIX, HEALTH_PATH
from messagemind.web.pipeline import build_middleware
from messagemind.web.routers import api_router

ROOT_PAYLOAD = {"status": "ok", "message": "Backend running", "health": HEALTH_PATH}


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="MessageMind API",
        lifespan=lifespan,
        middleware=build_middleware(app_instance),
    )
    app.state.app = app_instance
    app.state.config = config

    app.include_router(api_router, prefix=API_PREFIX)

    # Root info endpoint for uptime checks (not under /api, no auth)
    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return dict(ROOT_PAYLOAD)

    app.add_exception_handler(ApiError, api_error_handler)

    set_custom_openapi(app)

    return app
