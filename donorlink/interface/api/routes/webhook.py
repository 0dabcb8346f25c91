"""Payment provider webhook routes."""

import json

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request

from donorlink.application.usecase.webhook import (
    HandlePayPalWebhookRequest,
    HandlePayPalWebhookResponse,
    HandlePayPalWebhookUseCase,
)
from donorlink.interface.error import InvalidPayloadError

router = APIRouter(prefix="/api/webhook", tags=["webhook"], route_class=DishkaRoute)


@router.post("/paypal", response_model=HandlePayPalWebhookResponse)
async def paypal_webhook(
    request: Request,
    handle_paypal_webhook_use_case: FromDishka[HandlePayPalWebhookUseCase],
) -> HandlePayPalWebhookResponse:
    """Receive a signed PayPal event.

    Acknowledged with 200 once the signature checks out; processing
    failures are recorded in the audit log instead of triggering a
    redelivery.

    Raises:
        InvalidPayloadError: If the body is not a JSON object
    """
    raw = await request.body()
    try:
        event = json.loads(raw or b"null")
    except ValueError as e:
        raise InvalidPayloadError("Webhook payload is not valid JSON") from e
    if not isinstance(event, dict):
        raise InvalidPayloadError("Webhook payload must be a JSON object")

    return await handle_paypal_webhook_use_case.execute(
        HandlePayPalWebhookRequest(headers=dict(request.headers), event=event)
    )
