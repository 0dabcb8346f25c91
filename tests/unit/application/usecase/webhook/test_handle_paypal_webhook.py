"""Unit tests for HandlePayPalWebhookUseCase."""

import asyncio
from datetime import UTC, datetime

import pytest

from donorlink.adapter.http import ScriptedTransport
from donorlink.adapter.mail import RecordingMailer
from donorlink.application.usecase.webhook import (
    HandlePayPalWebhookRequest,
    HandlePayPalWebhookUseCase,
    parse_event_time,
)
from donorlink.domain.error import ValidationError, WebhookVerificationError
from donorlink.domain.repository import (
    DonorRepository,
    EventRepository,
    PaymentRepository,
)
from donorlink.domain.service import DonorService, InviteService
from donorlink.domain.value import DonorStatus
from donorlink.persistence.repository.inmemory import InMemoryTransactionManager
from tests.factories import (
    configure_paypal,
    configure_portal,
    configure_smtp,
    seed_donor,
    seed_invite,
)
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


def subscription_event(event_type, subscription_id, create_time, **resource):
    return {
        "id": f"WH-{event_type}-{create_time}",
        "event_type": event_type,
        "create_time": create_time,
        "resource": {"id": subscription_id, **resource},
    }


async def scripted_paypal(unit_env, verification="SUCCESS") -> ScriptedTransport:
    await configure_paypal(unit_env)
    transport = await unit_env.get(ScriptedTransport)
    transport.add(200, {"access_token": "tok"}, method="POST", match="/v1/oauth2/token")
    transport.add(200, {"verification_status": verification}, match="verify-webhook")
    return transport


async def deliver(unit_env, event):
    use_case = await unit_env.get(HandlePayPalWebhookUseCase)
    return await use_case.execute(
        HandlePayPalWebhookRequest(
            headers={"paypal-transmission-id": "tx-1"}, event=event
        )
    )


class TestVerification:
    """Deliveries are verified before anything is applied."""

    @pytest.mark.asyncio
    async def test_invalid_signature(self, unit_env):
        """A failed verification should be rejected and leave donors untouched."""
        # Arrange
        await scripted_paypal(unit_env, verification="FAILURE")
        donor, _ = await seed_donor(unit_env, subscription_id="I-1")

        # Act / Assert
        with pytest.raises(ValidationError):
            await deliver(
                unit_env,
                subscription_event(
                    "BILLING.SUBSCRIPTION.CANCELLED", "I-1", "2026-01-10T12:00:00Z"
                ),
            )
        donors = await unit_env.get(DonorRepository)
        assert (await donors.find_by_id(donor.id)).status == DonorStatus.ACTIVE
        events = await unit_env.get(EventRepository)
        assert len(events.of_type("paypal.webhook.received")) == 1

    @pytest.mark.asyncio
    async def test_verification_call_failure(self, unit_env):
        """An unreachable verification endpoint is a server-side failure."""
        await configure_paypal(unit_env)
        transport = await unit_env.get(ScriptedTransport)
        transport.add(200, {"access_token": "tok"}, method="POST", match="/v1/oauth2/token")
        transport.add(500, "boom", match="verify-webhook")

        with pytest.raises(WebhookVerificationError):
            await deliver(
                unit_env,
                subscription_event(
                    "BILLING.SUBSCRIPTION.ACTIVATED", "I-1", "2026-01-10T12:00:00Z"
                ),
            )


class TestSubscriptionEvents:
    """Subscription lifecycle events drive the donor state machine."""

    @pytest.mark.asyncio
    async def test_activation_creates_donor_and_invite(self, unit_env):
        """An activation for an unknown subscription should onboard the payer."""
        # Arrange
        transport = await scripted_paypal(unit_env)
        await configure_portal(unit_env)
        transport.add(201, {"code": "ACTIVE0001"}, method="POST", match="portal.example.com")

        # Act
        response = await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.ACTIVATED",
                "I-NEW",
                "2026-01-10T12:00:00Z",
                status="ACTIVE",
                subscriber={
                    "email_address": "New@Example.com",
                    "name": {"given_name": "Nia", "surname": "Lee"},
                },
            ),
        )

        # Assert
        assert response.received
        donor_service = await unit_env.get(DonorService)
        donor = await donor_service.find_by_subscription_id("I-NEW")
        assert donor.email == "new@example.com"
        assert donor.name == "Nia Lee"
        assert donor.status == DonorStatus.ACTIVE
        assert donor.last_event_at == datetime(2026, 1, 10, 12, tzinfo=UTC)
        invite_service = await unit_env.get(InviteService)
        invite = await invite_service.get_latest_active(donor.id)
        assert invite.code == "ACTIVE0001"
        assert invite.recipient_email == "new@example.com"

    @pytest.mark.asyncio
    async def test_cancellation_revokes_access(self, unit_env):
        """Cancelling should revoke invites and email the donor."""
        # Arrange
        transport = await scripted_paypal(unit_env)
        await configure_portal(unit_env)
        await configure_smtp(unit_env)
        transport.add(204, method="DELETE")
        donor, _ = await seed_donor(unit_env, subscription_id="I-1")
        invite = await seed_invite(unit_env, donor, "friend@example.com")

        # Act
        await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.CANCELLED", "I-1", "2026-01-10T12:00:00Z"
            ),
        )

        # Assert
        donors = await unit_env.get(DonorRepository)
        assert (await donors.find_by_id(donor.id)).status == DonorStatus.CANCELLED
        invite_service = await unit_env.get(InviteService)
        assert await invite_service.list_active(donor.id) == []
        assert transport.calls_to(invite.code, method="DELETE")
        mailer = await unit_env.get(RecordingMailer)
        assert [message["Subject"] for message in mailer.sent] == [
            "Your Plex access has ended"
        ]

    @pytest.mark.asyncio
    async def test_suspension_only_revokes_invites(self, unit_env):
        """Suspension should not email the donor."""
        transport = await scripted_paypal(unit_env)
        await configure_portal(unit_env)
        await configure_smtp(unit_env)
        transport.add(204, method="DELETE")
        donor, _ = await seed_donor(unit_env, subscription_id="I-1")
        await seed_invite(unit_env, donor, "friend@example.com")

        await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.SUSPENDED", "I-1", "2026-01-10T12:00:00Z"
            ),
        )

        invite_service = await unit_env.get(InviteService)
        assert await invite_service.list_active(donor.id) == []
        mailer = await unit_env.get(RecordingMailer)
        assert mailer.sent == []

    @pytest.mark.asyncio
    async def test_stale_event_is_ignored(self, unit_env):
        """An event older than the last applied one should not change status."""
        # Arrange
        await scripted_paypal(unit_env)
        donor, _ = await seed_donor(unit_env, subscription_id="I-1")
        donor_service = await unit_env.get(DonorService)
        await donor_service.update_status(
            donor,
            DonorStatus.ACTIVE,
            event_time=datetime(2026, 1, 10, 12, tzinfo=UTC),
        )

        # Act
        await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.CANCELLED", "I-1", "2026-01-10T11:00:00Z"
            ),
        )

        # Assert
        donors = await unit_env.get(DonorRepository)
        assert (await donors.find_by_id(donor.id)).status == DonorStatus.ACTIVE
        events = await unit_env.get(EventRepository)
        updates = events.of_type("paypal.subscription.updated")
        assert updates[-1].payload["stale"] is True

    @pytest.mark.asyncio
    async def test_time_without_offset_is_utc(self, unit_env):
        """A create_time without an offset should be ordered as UTC."""
        # Arrange
        await scripted_paypal(unit_env)
        donor, _ = await seed_donor(unit_env, subscription_id="I-1")
        donor_service = await unit_env.get(DonorService)
        await donor_service.update_status(
            donor,
            DonorStatus.ACTIVE,
            event_time=datetime(2026, 1, 10, 12, tzinfo=UTC),
        )

        # Act
        await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.SUSPENDED", "I-1", "2026-01-10T11:00:00"
            ),
        )

        # Assert
        donors = await unit_env.get(DonorRepository)
        stored = await donors.find_by_id(donor.id)
        assert stored.status == DonorStatus.ACTIVE
        assert stored.last_event_at == datetime(2026, 1, 10, 12, tzinfo=UTC)
        events = await unit_env.get(EventRepository)
        assert events.of_type("paypal.webhook.error") == []

    def test_parse_event_time_attaches_utc(self):
        """Should return an aware datetime for naive and offset values alike."""
        naive = parse_event_time("2026-01-10T11:00:00")
        offset = parse_event_time("2026-01-10T13:00:00+02:00")

        assert naive == datetime(2026, 1, 10, 11, tzinfo=UTC)
        assert offset == naive
        assert offset.tzinfo == UTC
        assert parse_event_time("yesterday") is None

    @pytest.mark.asyncio
    async def test_concurrent_deliveries_end_on_newest_state(self, unit_env):
        """Out-of-order deliveries for one subscription should converge."""
        # Arrange
        await scripted_paypal(unit_env)
        donor, _ = await seed_donor(unit_env, subscription_id="I-ORD")

        # Act
        await asyncio.gather(
            deliver(
                unit_env,
                subscription_event(
                    "BILLING.SUBSCRIPTION.CANCELLED", "I-ORD", "2026-01-10T12:00:00Z"
                ),
            ),
            deliver(
                unit_env,
                subscription_event(
                    "BILLING.SUBSCRIPTION.SUSPENDED", "I-ORD", "2026-01-10T11:00:00Z"
                ),
            ),
        )

        # Assert
        donors = await unit_env.get(DonorRepository)
        stored = await donors.find_by_id(donor.id)
        assert stored.status == DonorStatus.CANCELLED
        assert stored.last_event_at == datetime(2026, 1, 10, 12, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_unmatched_subscription(self, unit_env):
        """Events for unknown subscriptions are logged, not applied."""
        await scripted_paypal(unit_env)

        response = await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.CANCELLED", "I-GHOST", "2026-01-10T12:00:00Z"
            ),
        )

        assert response.received
        events = await unit_env.get(EventRepository)
        unmatched = events.of_type("paypal.webhook.unmatched")
        assert unmatched[0].payload["subscriptionId"] == "I-GHOST"


class TestPaymentEvents:
    """Completed payments are recorded and activate the donor."""

    @pytest.mark.asyncio
    async def test_payment_recorded_once(self, unit_env):
        """A redelivered payment should not be recorded twice."""
        # Arrange
        transport = await scripted_paypal(unit_env)
        await configure_portal(unit_env)
        transport.add(201, {"code": "PAID000001"}, method="POST", match="portal.example.com")
        donor, _ = await seed_donor(
            unit_env, status=DonorStatus.PENDING, subscription_id="I-PAY"
        )
        event = {
            "id": "WH-PAY-1",
            "event_type": "PAYMENT.SALE.COMPLETED",
            "create_time": "2026-01-10T12:00:00Z",
            "resource": {
                "id": "SALE-1",
                "billing_agreement_id": "I-PAY",
                "amount": {"total": "5.00", "currency": "USD"},
                "state": "completed",
            },
        }

        # Act
        await deliver(unit_env, event)
        await deliver(unit_env, event)

        # Assert
        payments = await (await unit_env.get(PaymentRepository)).find_by_donor(donor.id)
        assert [payment.transaction_id for payment in payments] == ["SALE-1"]
        assert payments[0].currency == "USD"
        donors = await unit_env.get(DonorRepository)
        assert (await donors.find_by_id(donor.id)).status == DonorStatus.ACTIVE
        events = await unit_env.get(EventRepository)
        assert len(events.of_type("paypal.payment.recorded")) == 2


class TestProcessingFailures:
    """Processing errors are logged and the delivery is still acknowledged."""

    @pytest.mark.asyncio
    async def test_portal_failure_is_logged(self, unit_env):
        """An unconfigured portal should not fail the delivery."""
        # Arrange
        await scripted_paypal(unit_env)
        donor, _ = await seed_donor(
            unit_env, status=DonorStatus.PENDING, subscription_id="I-1"
        )

        # Act
        response = await deliver(
            unit_env,
            subscription_event(
                "BILLING.SUBSCRIPTION.ACTIVATED", "I-1", "2026-01-10T12:00:00Z"
            ),
        )

        # Assert
        assert response.received
        events = await unit_env.get(EventRepository)
        assert len(events.of_type("paypal.webhook.error")) == 1
        transaction = await unit_env.get(InMemoryTransactionManager)
        assert transaction.commits >= 2
