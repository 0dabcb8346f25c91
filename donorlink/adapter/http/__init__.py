"""Outbound HTTP transport and provider negotiation."""

from .negotiation import (
    AUTH_STRATEGIES,
    AuthStrategy,
    NegotiatedResponse,
    RequestAttempt,
    describe_attempts,
    perform_request,
    request_with_fallback,
)
from .transport import (
    HttpxTransport,
    ScriptedTransport,
    Transport,
    TransportResponse,
)
from .urls import build_request_url, get_portal_url, normalize_id

__all__ = [
    "AUTH_STRATEGIES",
    "AuthStrategy",
    "HttpxTransport",
    "NegotiatedResponse",
    "RequestAttempt",
    "ScriptedTransport",
    "Transport",
    "TransportResponse",
    "build_request_url",
    "describe_attempts",
    "get_portal_url",
    "normalize_id",
    "perform_request",
    "request_with_fallback",
]
