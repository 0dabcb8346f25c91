"""Payment webhook use cases."""

from donorlink.application.usecase.webhook.handle_paypal_webhook import (
    HandlePayPalWebhookRequest,
    HandlePayPalWebhookResponse,
    HandlePayPalWebhookUseCase,
    parse_event_time,
    subscription_key,
)

__all__ = [
    "HandlePayPalWebhookRequest",
    "HandlePayPalWebhookResponse",
    "HandlePayPalWebhookUseCase",
    "parse_event_time",
    "subscription_key",
]
