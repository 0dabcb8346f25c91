"""PayPal payment adapter."""

from .client import (
    PayPalClient,
    build_subscriber_details,
    checkout_url,
    parse_subscription,
)

__all__ = [
    "PayPalClient",
    "build_subscriber_details",
    "checkout_url",
    "parse_subscription",
]
