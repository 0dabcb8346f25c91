"""Unit tests for the donor sign-in use cases."""

import pytest

from donorlink.application.usecase.admin import (
    AdminSessionRequest,
    GetAdminSessionUseCase,
)
from donorlink.application.usecase.customer import (
    CustomerLoginRequest,
    CustomerLoginUseCase,
    CustomerLogoutUseCase,
    CustomerSessionRequest,
    GetCustomerSessionUseCase,
)
from donorlink.domain.error import UnauthorizedError, ValidationError
from donorlink.domain.value import DonorStatus
from tests.factories import seed_account, seed_donor, seed_invite
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def sign_in(unit_env, email="donor@example.com", password="password123"):
    login = await unit_env.get(CustomerLoginUseCase)
    return await login.execute(CustomerLoginRequest(email=email, password=password))


class TestCustomerLogin:
    """Donors sign in with the password from share-link account setup."""

    @pytest.mark.asyncio
    async def test_login_returns_dashboard(self, unit_env):
        """Should open a session and return the donor with their invite."""
        # Arrange
        donor = await seed_account(unit_env)
        invite = await seed_invite(unit_env, donor, "friend@example.com")

        # Act
        dashboard = await sign_in(unit_env, email="  Donor@Example.com ")

        # Assert
        assert dashboard.authenticated
        assert dashboard.session_id
        assert dashboard.donor.id == str(donor.id)
        assert dashboard.donor.has_password is True
        assert dashboard.invite.id == str(invite.id)
        assert "sessionId" not in dashboard.public()

    @pytest.mark.asyncio
    async def test_wrong_password(self, unit_env):
        await seed_account(unit_env)

        with pytest.raises(UnauthorizedError) as raised:
            await sign_in(unit_env, password="not-the-password")

        assert raised.value.message == "Invalid email or password."

    @pytest.mark.asyncio
    async def test_unknown_email_looks_like_wrong_password(self, unit_env):
        """Should not reveal whether the email is registered."""
        with pytest.raises(UnauthorizedError) as raised:
            await sign_in(unit_env, email="nobody@example.com")

        assert raised.value.message == "Invalid email or password."

    @pytest.mark.asyncio
    async def test_account_not_set_up(self, unit_env):
        """A donor without a password should be sent to their invite link."""
        await seed_donor(unit_env)

        with pytest.raises(UnauthorizedError) as raised:
            await sign_in(unit_env)

        assert "not yet set up" in raised.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [("", "password123"), ("donor@example.com", ""), ("not-an-email", "x")],
    )
    async def test_missing_or_malformed_input(self, unit_env, email, password):
        with pytest.raises(ValidationError):
            await sign_in(unit_env, email=email, password=password)

    @pytest.mark.asyncio
    async def test_cancelled_donor_can_still_sign_in(self, unit_env):
        """Should show the ended subscription instead of refusing the login."""
        await seed_account(unit_env, status=DonorStatus.CANCELLED)

        dashboard = await sign_in(unit_env)

        assert dashboard.donor.status == "cancelled"


class TestCustomerSession:
    @pytest.mark.asyncio
    async def test_session_and_logout(self, unit_env):
        """Should report the dashboard until the donor logs out."""
        # Arrange
        await seed_account(unit_env)
        dashboard = await sign_in(unit_env)
        request = CustomerSessionRequest(session_id=dashboard.session_id)
        get_session = await unit_env.get(GetCustomerSessionUseCase)
        logout = await unit_env.get(CustomerLogoutUseCase)

        # Act
        before = await get_session.execute(request)
        await logout.execute(request)
        after = await get_session.execute(request)

        # Assert
        assert before.authenticated
        assert before.donor.email == "donor@example.com"
        assert not after.authenticated
        assert after.donor is None

    @pytest.mark.asyncio
    async def test_donor_session_is_not_an_admin_session(self, unit_env):
        """A donor cookie should never open the admin console."""
        await seed_account(unit_env)
        dashboard = await sign_in(unit_env)
        get_admin_session = await unit_env.get(GetAdminSessionUseCase)

        state = await get_admin_session.execute(
            AdminSessionRequest(session_id=dashboard.session_id)
        )

        assert not state.authenticated
