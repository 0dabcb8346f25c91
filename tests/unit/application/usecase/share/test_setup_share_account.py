"""Unit tests for SetupShareAccountUseCase."""

import pytest

from donorlink.application.usecase.share import (
    SetupShareAccountRequest,
    SetupShareAccountUseCase,
)
from donorlink.domain.error import ConflictError, ForbiddenError, ValidationError
from donorlink.domain.repository import (
    DonorRepository,
    ProspectRepository,
    ShareLinkRepository,
)
from donorlink.domain.service import DonorService, PasswordService
from donorlink.domain.value import DonorStatus
from donorlink.persistence.repository.inmemory import InMemoryTransactionManager
from tests.factories import seed_donor, seed_prospect
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


def account_request(link, **overrides) -> SetupShareAccountRequest:
    values = {
        "token": link.token,
        "password": "password123",
        "confirm_password": "password123",
        "session_token": link.session_token,
        **overrides,
    }
    return SetupShareAccountRequest(**values)


class TestProspectPromotion:
    """A prospect link setting a password becomes a donor."""

    @pytest.mark.asyncio
    async def test_promotes_prospect_to_new_donor(self, unit_env):
        """Should create the donor, move the link and convert the prospect."""
        # Arrange
        prospect, link = await seed_prospect(unit_env)
        use_case = await unit_env.get(SetupShareAccountUseCase)

        # Act
        projection = await use_case.execute(
            account_request(
                link,
                email="future@example.com",
                name="F S",
                subscription_id="I-NEW123",
            )
        )

        # Assert
        donors = await unit_env.get(DonorRepository)
        donor = await donors.find_by_subscription_id("I-NEW123")
        assert donor is not None
        assert donor.email == "future@example.com"
        assert donor.name == "F S"
        assert donor.status == DonorStatus.PENDING
        assert donor.password_hash

        links = await unit_env.get(ShareLinkRepository)
        moved = await links.find_by_id(link.id)
        assert moved.donor_id == donor.id
        assert moved.prospect_id is None

        prospects = await unit_env.get(ProspectRepository)
        converted = await prospects.find_by_id(prospect.id)
        assert converted.converted_at is not None
        assert converted.converted_donor_id == donor.id

        assert projection.donor.has_password is True
        assert projection.prospect is None

    @pytest.mark.asyncio
    async def test_prospect_matches_donor_without_password(self, unit_env):
        """An existing donor without a password should be reused."""
        donor, _ = await seed_donor(unit_env, email="future@example.com")
        _, link = await seed_prospect(unit_env)
        use_case = await unit_env.get(SetupShareAccountUseCase)

        projection = await use_case.execute(account_request(link))

        assert projection.donor.id == str(donor.id)
        assert projection.donor.has_password is True

    @pytest.mark.asyncio
    async def test_prospect_replaces_password_of_matched_donor(self, unit_env):
        """Should update the matched donor's contact and replace the hash."""
        # Arrange
        donor, _ = await seed_donor(unit_env, email="future@example.com")
        donor_service = await unit_env.get(DonorService)
        await donor_service.set_password_hash(donor, "pbkdf2$1$aa$bb")
        _, link = await seed_prospect(unit_env)
        use_case = await unit_env.get(SetupShareAccountUseCase)
        password_service = await unit_env.get(PasswordService)

        # Act
        projection = await use_case.execute(account_request(link, name="Future S"))

        # Assert
        donors = await unit_env.get(DonorRepository)
        stored = await donors.find_by_id(donor.id)
        assert projection.donor.id == str(donor.id)
        assert stored.name == "Future S"
        assert stored.password_hash != "pbkdf2$1$aa$bb"
        assert await password_service.verify_password(
            "password123", stored.password_hash
        )



class TestDonorAccount:
    """A donor link setting a password."""

    @pytest.mark.asyncio
    async def test_sets_password_and_subscription(self, unit_env):
        """Should hash the password and link the subscription id."""
        # Arrange
        donor, link = await seed_donor(unit_env, status=DonorStatus.PENDING)
        use_case = await unit_env.get(SetupShareAccountUseCase)
        password_service = await unit_env.get(PasswordService)

        # Act
        await use_case.execute(account_request(link, subscription_id="I-77"))

        # Assert
        donors = await unit_env.get(DonorRepository)
        stored = await donors.find_by_id(donor.id)
        assert stored.subscription_id == "I-77"
        assert await password_service.verify_password(
            "password123", stored.password_hash
        )

    @pytest.mark.asyncio
    async def test_short_password(self, unit_env):
        """Seven characters should be rejected before anything is stored."""
        donor, link = await seed_donor(unit_env)
        use_case = await unit_env.get(SetupShareAccountUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(
                account_request(link, password="1234567", confirm_password="1234567")
            )

        donors = await unit_env.get(DonorRepository)
        assert (await donors.find_by_id(donor.id)).password_hash is None

    @pytest.mark.asyncio
    async def test_cancelled_donor(self, unit_env):
        _, link = await seed_donor(unit_env, status=DonorStatus.CANCELLED)
        use_case = await unit_env.get(SetupShareAccountUseCase)

        with pytest.raises(ForbiddenError):
            await use_case.execute(account_request(link))


class TestAtomicSetup:
    """A failure part way through setup leaves nothing behind."""

    @pytest.mark.asyncio
    async def test_subscription_conflict_discards_contact_change(self, unit_env):
        """Should keep the old email and no password on a subscription clash."""
        # Arrange
        await seed_donor(
            unit_env, email="holder@example.com", subscription_id="I-TAKEN"
        )
        donor, link = await seed_donor(unit_env, email="donor@example.com")
        use_case = await unit_env.get(SetupShareAccountUseCase)
        transaction = await unit_env.get(InMemoryTransactionManager)

        # Act
        with pytest.raises(ConflictError):
            await use_case.execute(
                account_request(
                    link, email="changed@example.com", subscription_id="I-TAKEN"
                )
            )

        # Assert
        donors = await unit_env.get(DonorRepository)
        stored = await donors.find_by_id(donor.id)
        assert stored.email == "donor@example.com"
        assert stored.password_hash is None
        assert await donors.find_by_email("changed@example.com") is None
        assert transaction.rollbacks == 1
