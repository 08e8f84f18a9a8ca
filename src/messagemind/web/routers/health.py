from typing import Any

from fastapi import APIRouter

from messagemind.web.deps import AppDep
from messagemind.web.paths import HEALTH_ROUTE

router = APIRouter(tags=["health"])


@router.get(
    HEALTH_ROUTE,
    summary="Health check",
    description="Reports service status and the active environment. Does not require authentication.",
    operation_id="getHealth",
    responses={200: {"description": "Service is up"}},
)
async def health_check(app: AppDep) -> dict[str, Any]:
    return app.health()
