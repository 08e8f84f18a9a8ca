from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from messagemind.web.paths import STRIPE_WEBHOOK_PATH


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="MessageMind API",
            version="0.1.0",
            summary="MessageMind backend",
            routes=app.routes,
        )

        # The webhook takes the raw Stripe payload, not a JSON model
        webhook = openapi_schema["paths"].get(STRIPE_WEBHOOK_PATH, {}).get("post")
        if webhook is not None:
            webhook["requestBody"] = {
                "required": True,
                "content": {"application/json": {"schema": {"type": "string", "format": "binary"}}},
            }

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Human-readable error message")
    type: str | None = Field(None, description="Machine-readable error type")
    message: str | None = Field(None, description="Fault details, development only")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error": "Invalid JSON body: Expecting value", "type": "malformed_body"},
                {"error": "Request body exceeds 52428800 bytes", "type": "payload_too_large"},
                {"error": "Internal server error"},
            ]
        }
    }
