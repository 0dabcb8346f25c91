"""Integration tests for the PostgreSQL repositories.

These tests run against a migrated postgres (``DATABASE__URL``).
"""

import os
from decimal import Decimal
from uuid import uuid4

import pytest

from donorlink.domain.model.invite import Invite
from donorlink.domain.repository import (
    DonorRepository,
    InviteRepository,
    SettingsRepository,
)
from donorlink.domain.service import DonorService, PaymentService
from donorlink.domain.value import DonorStatus, InviteId
from donorlink.domain.model.common import utc_now
from tests.harness import create_env_fixture

pytestmark = pytest.mark.skipif(
    "DATABASE__URL" not in os.environ,
    reason="needs a migrated postgres (set DATABASE__URL)",
)

integration_env = create_env_fixture(unmock={"persistence"})


def unique_email() -> str:
    return f"donor-{uuid4().hex[:12]}@example.com"


class TestDonorRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_find_by_email_ignores_case(self, integration_env):
        """Should match the stored lowercase email from any casing."""
        # Arrange
        donor_service = await integration_env.get(DonorService)
        email = unique_email()
        donor = await donor_service.create_donor(email)

        # Act
        donor_repo = await integration_env.get(DonorRepository)
        found = await donor_repo.find_by_email(email.upper())

        # Assert
        assert found is not None
        assert found.id == donor.id

    @pytest.mark.asyncio
    async def test_status_and_event_time_round_trip(self, integration_env):
        """Should persist the status and the last applied event time."""
        donor_service = await integration_env.get(DonorService)
        donor = await donor_service.create_donor(
            unique_email(), subscription_id=f"I-{uuid4().hex[:10]}"
        )
        event_time = utc_now()

        await donor_service.update_status(
            donor, DonorStatus.SUSPENDED, event_time=event_time
        )
        donor_repo = await integration_env.get(DonorRepository)
        stored = await donor_repo.find_by_subscription_id(donor.subscription_id)

        assert stored.status == DonorStatus.SUSPENDED
        assert stored.last_event_at == event_time


class TestInviteRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_active_invites_exclude_revoked(self, integration_env):
        """Should only return invites without a revocation time."""
        # Arrange
        donor_service = await integration_env.get(DonorService)
        donor = await donor_service.create_donor(unique_email())
        invite_repo = await integration_env.get(InviteRepository)
        active = Invite(
            id=InviteId(uuid4()),
            donor_id=donor.id,
            code="INTEG00001",
            url="https://portal.example.com/invite/INTEG00001",
            recipient_email=donor.email,
            created_at=utc_now(),
        )
        revoked = active.model_copy(
            update={"id": InviteId(uuid4()), "code": "INTEG00002", "revoked_at": utc_now()}
        )
        await invite_repo.save(active)
        await invite_repo.save(revoked)

        # Act
        found = await invite_repo.find_active_by_donor(donor.id)

        # Assert
        assert [invite.code for invite in found] == ["INTEG00001"]
        assert len(await invite_repo.find_by_donor(donor.id)) == 2


class TestPaymentLedgerIntegration:
    @pytest.mark.asyncio
    async def test_payment_recorded_once(self, integration_env):
        """Should return the stored entry for a repeated transaction id."""
        donor_service = await integration_env.get(DonorService)
        payment_service = await integration_env.get(PaymentService)
        donor = await donor_service.create_donor(unique_email())
        transaction_id = f"SALE-{uuid4().hex[:10]}"

        first = await payment_service.record_payment(
            donor, transaction_id, amount="5.00", currency="USD"
        )
        second = await payment_service.record_payment(
            donor, transaction_id, amount="5.00", currency="USD"
        )

        assert first.id == second.id
        assert first.amount == Decimal("5.00")


class TestSettingsRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_save_group_upserts(self, integration_env):
        settings_repo = await integration_env.get(SettingsRepository)

        await settings_repo.save_group("app", {"publicBaseUrl": "https://a.example"})
        await settings_repo.save_group("app", {"publicBaseUrl": "https://b.example"})

        stored = await settings_repo.get_all()
        assert stored["app"]["publicBaseUrl"] == "https://b.example"
