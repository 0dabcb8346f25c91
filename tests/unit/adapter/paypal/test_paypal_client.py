"""Unit tests for the PayPal client."""

from datetime import UTC, datetime

import pytest

from donorlink.adapter.error import PaymentProviderError, ProviderNotConfiguredError
from donorlink.adapter.http import ScriptedTransport
from donorlink.adapter.paypal import (
    PayPalClient,
    build_subscriber_details,
    checkout_url,
    parse_subscription,
)
from donorlink.domain.model.settings import PayPalSettings

SETTINGS = PayPalSettings(client_id="cid", client_secret="secret", webhook_id="WH-1")
API = "https://api-m.sandbox.paypal.com"


@pytest.fixture
def transport():
    transport = ScriptedTransport()
    transport.add(200, {"access_token": "tok"}, method="POST", match="/v1/oauth2/token")
    return transport


@pytest.fixture
def client(transport):
    return PayPalClient(transport)


class TestHelpers:
    """Tests for PayPal payload helpers."""

    def test_build_subscriber_details(self):
        """Should split the name into given name and surname."""
        assert build_subscriber_details("a@example.com", "Ada Byron King") == {
            "email_address": "a@example.com",
            "name": {"given_name": "Ada", "surname": "Byron King"},
        }
        assert build_subscriber_details(None, "  ") is None

    def test_checkout_url(self):
        """Should point at the hosted plan checkout."""
        assert (
            checkout_url("P-1")
            == "https://www.paypal.com/webapps/billing/plans/subscribe?plan_id=P-1"
        )

    def test_parse_subscription(self):
        """Should map subscriber and last payment."""
        subscription = parse_subscription(
            {
                "id": "I-1",
                "status": "ACTIVE",
                "subscriber": {
                    "email_address": "a@example.com",
                    "name": {"given_name": "Ada", "surname": "Byron"},
                },
                "billing_info": {"last_payment": {"time": "2026-01-02T03:04:05Z"}},
            }
        )

        assert subscription.id == "I-1"
        assert subscription.subscriber.email == "a@example.com"
        assert subscription.subscriber.name == "Ada Byron"
        assert subscription.last_payment_at == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


class TestAccessToken:
    """Tests for PayPalClient.get_access_token."""

    @pytest.mark.asyncio
    async def test_uses_client_credentials(self, transport, client):
        """Should post client credentials with basic auth."""
        token = await client.get_access_token(SETTINGS)

        call = transport.calls[0]
        assert token == "tok"
        assert call.url == f"{API}/v1/oauth2/token"
        assert call.headers["Authorization"].startswith("Basic ")
        assert call.form == {"grant_type": "client_credentials"}

    @pytest.mark.asyncio
    async def test_missing_credentials(self, client):
        """Should refuse to call PayPal without credentials."""
        with pytest.raises(ProviderNotConfiguredError):
            await client.get_access_token(PayPalSettings())

    @pytest.mark.asyncio
    async def test_rejected_credentials(self):
        """Should raise PaymentProviderError on a non-OK answer."""
        transport = ScriptedTransport().add(401, {"error": "invalid_client"})

        with pytest.raises(PaymentProviderError) as exc_info:
            await PayPalClient(transport).get_access_token(SETTINGS)

        assert exc_info.value.status == 401


class TestVerifyWebhookSignature:
    """Tests for PayPalClient.verify_webhook_signature."""

    @pytest.mark.asyncio
    async def test_success(self, transport, client):
        """Should forward transmission headers and report success."""
        # Arrange
        transport.add(200, {"verification_status": "SUCCESS"}, match="verify-webhook")
        headers = {"PAYPAL-TRANSMISSION-ID": "t-1", "Paypal-Auth-Algo": "SHA256"}
        event = {"id": "WH-EVT", "event_type": "BILLING.SUBSCRIPTION.ACTIVATED"}

        # Act
        result = await client.verify_webhook_signature(SETTINGS, headers, event)

        # Assert
        assert result.verified
        body = transport.calls_to("verify-webhook")[0].body
        assert body["transmission_id"] == "t-1"
        assert body["auth_algo"] == "SHA256"
        assert body["webhook_id"] == "WH-1"
        assert body["webhook_event"] == event

    @pytest.mark.asyncio
    async def test_failure_status(self, transport, client):
        """Should report a non-SUCCESS verification as unverified."""
        transport.add(200, {"verification_status": "FAILURE"}, match="verify-webhook")

        result = await client.verify_webhook_signature(SETTINGS, {}, {})

        assert not result.verified
        assert "FAILURE" in result.reason

    @pytest.mark.asyncio
    async def test_missing_webhook_id(self, transport, client):
        """Should not call PayPal without a webhook id."""
        result = await client.verify_webhook_signature(
            SETTINGS.model_copy(update={"webhook_id": ""}), {}, {}
        )

        assert not result.verified
        assert transport.calls == []


class TestCreateSubscription:
    """Tests for PayPalClient.create_subscription."""

    @pytest.mark.asyncio
    async def test_returns_approval_link(self, transport, client):
        """Should return the subscription id and approval link."""
        # Arrange
        transport.add(
            201,
            {
                "id": "I-NEW",
                "links": [
                    {"rel": "self", "href": "https://api/self"},
                    {"rel": "approve", "href": "https://paypal/approve"},
                ],
            },
            match="/v1/billing/subscriptions",
        )

        # Act
        session = await client.create_subscription(
            SETTINGS,
            "P-1",
            subscriber={"email_address": "a@example.com"},
            return_url="https://donate.example.com/share/t?checkout=success",
        )

        # Assert
        assert session.subscription_id == "I-NEW"
        assert session.approval_url == "https://paypal/approve"
        body = transport.calls_to("/v1/billing/subscriptions")[0].body
        assert body["plan_id"] == "P-1"
        assert body["application_context"] == {
            "return_url": "https://donate.example.com/share/t?checkout=success"
        }

    @pytest.mark.asyncio
    async def test_missing_approval_link(self, transport, client):
        """Should raise when PayPal omits the approval link."""
        transport.add(201, {"id": "I-NEW", "links": []}, match="/v1/billing/subscriptions")

        with pytest.raises(PaymentProviderError):
            await client.create_subscription(SETTINGS, "P-1")


class TestVerifyConnection:
    """Tests for PayPalClient.verify_connection."""

    @pytest.mark.asyncio
    async def test_reports_environment(self, client):
        """Should report the sandbox environment for the sandbox API."""
        report = await client.verify_connection(SETTINGS)

        assert report.details == {"environment": "sandbox"}
