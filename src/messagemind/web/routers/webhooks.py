"""Payment provider webhooks."""

from typing import Annotated

from fastapi import APIRouter, Header
from pydantic import BaseModel, Field

from messagemind.web.deps import AppDep, RawBodyDep
from messagemind.web.openapi import ErrorResponse
from messagemind.web.paths import STRIPE_WEBHOOK_ROUTE

router = APIRouter(tags=["webhooks"])


class WebhookAck(BaseModel):
    """Webhook acknowledgement."""

    received: bool = Field(True, description="The event was accepted for processing")


@router.post(
    STRIPE_WEBHOOK_ROUTE,
    summary="Receive Stripe events",
    description="Receives Stripe webhook events. The body is kept as raw bytes so the signature can be verified.",
    operation_id="stripeWebhook",
    responses={
        200: {"description": "Event received"},
        413: {"model": ErrorResponse, "description": "Payload too large"},
    },
)
async def stripe_webhook(
    app: AppDep,
    payload: RawBodyDep,
    stripe_signature: Annotated[str | None, Header()] = None,
) -> WebhookAck:
    await app.handle_stripe_webhook(payload, stripe_signature)
    return WebhookAck()
