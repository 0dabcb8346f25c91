"""PayPal REST client.

Uses client-credentials OAuth for every call; no token caching since calls
are infrequent (webhooks, checkouts, admin tests).
"""

from base64 import b64encode
from datetime import datetime
from typing import Any, Mapping
from urllib.parse import quote, urlencode

import logfire

from donorlink.adapter.error import (
    PaymentProviderError,
    ProviderNotConfiguredError,
    TransportError,
)
from donorlink.adapter.http.transport import Transport, TransportResponse
from donorlink.domain.model.settings import PayPalSettings
from donorlink.domain.service.payment_service import PaymentGateway
from donorlink.domain.value import (
    CheckoutSession,
    ConnectionReport,
    ProviderSubscription,
    SubscriberDetails,
    WebhookVerification,
)

TOKEN_PATH = "/v1/oauth2/token"
VERIFY_WEBHOOK_PATH = "/v1/notifications/verify-webhook-signature"
SUBSCRIPTIONS_PATH = "/v1/billing/subscriptions"
CHECKOUT_BASE_URL = "https://www.paypal.com/webapps/billing/plans/subscribe"

# Webhook transmission headers forwarded to signature verification
WEBHOOK_HEADERS = {
    "auth_algo": "paypal-auth-algo",
    "cert_url": "paypal-cert-url",
    "transmission_id": "paypal-transmission-id",
    "transmission_sig": "paypal-transmission-sig",
    "transmission_time": "paypal-transmission-time",
}


def build_subscriber_details(
    email: str | None = None, name: str | None = None
) -> dict[str, Any] | None:
    """Subscriber block for subscription creation.

    The first word of ``name`` becomes the given name, the rest the surname.
    """
    subscriber: dict[str, Any] = {}
    if email:
        subscriber["email_address"] = email
    parts = (name or "").split()
    if parts:
        subscriber["name"] = {"given_name": parts[0]}
        if len(parts) > 1:
            subscriber["name"]["surname"] = " ".join(parts[1:])
    return subscriber or None


def checkout_url(plan_id: str) -> str:
    """Hosted checkout URL for a plan."""
    return f"{CHECKOUT_BASE_URL}?{urlencode({'plan_id': plan_id})}"


def _parse_time(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_subscription(data: dict[str, Any]) -> ProviderSubscription:
    """Map a subscription resource onto ``ProviderSubscription``."""
    subscriber = data.get("subscriber") or {}
    name = subscriber.get("name") or {}
    full_name = " ".join(
        part for part in (name.get("given_name"), name.get("surname")) if part
    )
    last_payment = (data.get("billing_info") or {}).get("last_payment") or {}
    return ProviderSubscription(
        id=str(data.get("id") or ""),
        status=data.get("status"),
        last_payment_at=_parse_time(last_payment.get("time")),
        subscriber=SubscriberDetails(
            email=subscriber.get("email_address") or None,
            name=full_name or None,
        ),
        raw=data,
    )


class PayPalClient(PaymentGateway):
    """PayPal implementation of the payment gateway."""

    def __init__(self, transport: Transport, timeout: float | None = None) -> None:
        self.transport = transport
        self.timeout = timeout

    @staticmethod
    def _api_base(settings: PayPalSettings) -> str:
        return settings.api_base.strip().rstrip("/")

    async def _request(
        self,
        method: str,
        url: str,
        context: str,
        **kwargs: Any,
    ) -> TransportResponse:
        try:
            response = await self.transport.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except TransportError as e:
            raise PaymentProviderError(f"{context}: {e.message}") from e
        if not response.ok:
            logfire.error(
                "PayPal request failed", context=context, status=response.status
            )
            raise PaymentProviderError(
                f"{context}: {response.status} {response.text}".strip(),
                status=response.status,
                details=response.details(),
            )
        return response

    async def get_access_token(self, settings: PayPalSettings) -> str:
        """Obtain an OAuth token with the client credentials.

        Raises:
            ProviderNotConfiguredError: If client id or secret is missing
            PaymentProviderError: If PayPal rejects the request
        """
        if not settings.has_credentials:
            raise ProviderNotConfiguredError("PayPal credentials are not configured")

        credentials = b64encode(
            f"{settings.client_id}:{settings.client_secret}".encode("utf-8")
        ).decode("ascii")
        response = await self._request(
            "POST",
            f"{self._api_base(settings)}{TOKEN_PATH}",
            "PayPal access token request failed",
            headers={
                "Authorization": f"Basic {credentials}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data={"grant_type": "client_credentials"},
        )
        token = (response.json_body() or {}).get("access_token")
        if not token:
            raise PaymentProviderError("PayPal did not return an access token")
        return token

    async def _authorized_headers(self, settings: PayPalSettings) -> dict[str, str]:
        token = await self.get_access_token(settings)
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def verify_webhook_signature(
        self,
        settings: PayPalSettings,
        headers: Mapping[str, str],
        event: dict[str, Any],
    ) -> WebhookVerification:
        if not settings.webhook_id:
            return WebhookVerification(verified=False, reason="Missing PayPal webhook id")

        with logfire.span("paypal.verify_webhook_signature"):
            lowered = {key.lower(): value for key, value in headers.items()}
            body: dict[str, Any] = {
                field: lowered.get(header) for field, header in WEBHOOK_HEADERS.items()
            }
            body["webhook_id"] = settings.webhook_id
            body["webhook_event"] = event

            response = await self._request(
                "POST",
                f"{self._api_base(settings)}{VERIFY_WEBHOOK_PATH}",
                "PayPal webhook verification failed",
                headers=await self._authorized_headers(settings),
                json=body,
            )
            status = (response.json_body() or {}).get("verification_status")
            return WebhookVerification(
                verified=status == "SUCCESS",
                status=status,
                reason=None if status == "SUCCESS" else f"Verification status: {status}",
            )

    async def get_subscription(
        self, settings: PayPalSettings, subscription_id: str
    ) -> ProviderSubscription:
        with logfire.span("paypal.get_subscription", subscription_id=subscription_id):
            response = await self._request(
                "GET",
                f"{self._api_base(settings)}{SUBSCRIPTIONS_PATH}/{quote(subscription_id, safe='')}",
                "Failed to fetch PayPal subscription",
                headers=await self._authorized_headers(settings),
            )
            data = response.json_body()
            if not isinstance(data, dict):
                raise PaymentProviderError("Unexpected PayPal subscription response")
            return parse_subscription(data)

    async def create_subscription(
        self,
        settings: PayPalSettings,
        plan_id: str,
        subscriber: dict[str, Any] | None = None,
        return_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutSession:
        """Create a subscription awaiting approval.

        Raises:
            PaymentProviderError: If PayPal omits the approval link or id
        """
        body: dict[str, Any] = {"plan_id": plan_id}
        if subscriber:
            body["subscriber"] = subscriber
        context: dict[str, str] = {}
        if return_url:
            context["return_url"] = return_url
        if cancel_url:
            context["cancel_url"] = cancel_url
        if context:
            body["application_context"] = context

        with logfire.span("paypal.create_subscription", plan_id=plan_id):
            response = await self._request(
                "POST",
                f"{self._api_base(settings)}{SUBSCRIPTIONS_PATH}",
                "PayPal subscription creation failed",
                headers=await self._authorized_headers(settings),
                json=body,
            )
            data = response.json_body() or {}
            approve = next(
                (
                    link.get("href")
                    for link in data.get("links") or []
                    if isinstance(link, dict) and link.get("rel") == "approve"
                ),
                None,
            )
            if not approve or not data.get("id"):
                raise PaymentProviderError(
                    "PayPal did not return an approval link", details=data
                )
            return CheckoutSession(subscription_id=data["id"], approval_url=approve)

    async def verify_connection(self, settings: PayPalSettings) -> ConnectionReport:
        with logfire.span("paypal.verify_connection"):
            await self.get_access_token(settings)
            environment = "sandbox" if "sandbox" in settings.api_base else "live"
            return ConnectionReport(
                message="PayPal credentials verified successfully.",
                details={"environment": environment},
            )
