from fastapi import APIRouter

from messagemind.web.routers.health import router as health_router
from messagemind.web.routers.webhooks import router as webhooks_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(webhooks_router)

__all__ = [
    "api_router",
    "health_router",
    "webhooks_router",
]
