"""Unit tests for DonorService."""

import pytest

from donorlink.domain.error import ConflictError, NotFoundError, ValidationError
from donorlink.domain.repository import DonorRepository
from donorlink.domain.service import DonorService
from donorlink.domain.value import DonorId, DonorStatus
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestCreateDonor:
    """Tests for create_donor method."""

    @pytest.mark.asyncio
    async def test_create_donor_normalizes_email(self, unit_env):
        """Emails should be stored trimmed and lowercase."""
        # Arrange
        donor_service = await unit_env.get(DonorService)
        donor_repo = await unit_env.get(DonorRepository)

        # Act
        donor = await donor_service.create_donor("  Alice@Example.COM ", name=" Alice ")

        # Assert
        assert donor.email == "alice@example.com"
        assert donor.name == "Alice"
        assert donor.status == DonorStatus.PENDING
        assert donor.has_password is False
        assert await donor_repo.find_by_id(donor.id) == donor

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, unit_env):
        """A second donor with the same email should be rejected."""
        donor_service = await unit_env.get(DonorService)
        await donor_service.create_donor("alice@example.com")

        with pytest.raises(ConflictError):
            await donor_service.create_donor("ALICE@example.com")

    @pytest.mark.asyncio
    async def test_duplicate_subscription_conflicts(self, unit_env):
        """Subscription ids should be unique across donors."""
        donor_service = await unit_env.get(DonorService)
        await donor_service.create_donor("a@example.com", subscription_id="I-1")

        with pytest.raises(ConflictError):
            await donor_service.create_donor("b@example.com", subscription_id="I-1")

    @pytest.mark.asyncio
    async def test_invalid_email(self, unit_env):
        donor_service = await unit_env.get(DonorService)

        with pytest.raises(ValidationError):
            await donor_service.create_donor("not-an-email")


class TestUpdateContact:
    """Tests for update_contact method."""

    @pytest.mark.asyncio
    async def test_update_is_idempotent(self, unit_env):
        """Applying the same contact twice should change nothing the second time."""
        # Arrange
        donor_service = await unit_env.get(DonorService)
        donor = await donor_service.create_donor("old@example.com", subscription_id="I-7")

        # Act
        first = await donor_service.update_contact(donor, "New@Example.com", "New Name")
        second = await donor_service.update_contact(first, "new@example.com", "New Name")

        # Assert
        assert first.email == "new@example.com"
        assert first.name == "New Name"
        assert first.id == donor.id
        assert first.subscription_id == "I-7"
        assert second is first

    @pytest.mark.asyncio
    async def test_email_taken_by_other_donor(self, unit_env):
        """Moving to another donor's email should conflict."""
        donor_service = await unit_env.get(DonorService)
        await donor_service.create_donor("taken@example.com")
        donor = await donor_service.create_donor("mine@example.com")

        with pytest.raises(ConflictError):
            await donor_service.update_contact(donor, "taken@example.com")


class TestStatus:
    """Tests for status and lookup helpers."""

    @pytest.mark.asyncio
    async def test_update_status_records_times(self, unit_env):
        """Status updates should carry payment and event times."""
        # Arrange
        donor_service = await unit_env.get(DonorService)
        donor = await donor_service.create_donor("a@example.com")
        paid_at = donor.created_at

        # Act
        updated = await donor_service.update_status(
            donor, DonorStatus.ACTIVE, last_payment_at=paid_at, event_time=paid_at
        )

        # Assert
        assert updated.is_active
        assert updated.last_payment_at == paid_at
        assert updated.last_event_at == paid_at

    @pytest.mark.asyncio
    async def test_blocked_statuses(self, unit_env):
        donor_service = await unit_env.get(DonorService)
        donor = await donor_service.create_donor("a@example.com")

        for status in (DonorStatus.CANCELLED, DonorStatus.SUSPENDED, DonorStatus.EXPIRED):
            assert (await donor_service.update_status(donor, status)).is_blocked
        assert not donor.is_blocked

    @pytest.mark.asyncio
    async def test_get_missing_donor(self, unit_env):
        """Looking up an unknown id should raise NotFoundError."""
        from uuid import uuid4

        donor_service = await unit_env.get(DonorService)

        with pytest.raises(NotFoundError):
            await donor_service.get_donor(DonorId(uuid4()))

    @pytest.mark.asyncio
    async def test_find_by_subscription_ignores_blank(self, unit_env):
        donor_service = await unit_env.get(DonorService)
        await donor_service.create_donor("a@example.com", subscription_id="I-9")

        assert await donor_service.find_by_subscription_id("  ") is None
        assert (await donor_service.find_by_subscription_id(" I-9 ")).email == "a@example.com"
