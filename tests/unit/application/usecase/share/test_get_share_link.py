"""Unit tests for GetShareLinkUseCase."""

import pytest

from donorlink.application.usecase.share import GetShareLinkRequest, GetShareLinkUseCase
from donorlink.domain.error import ForbiddenError, NotFoundError
from donorlink.domain.value import DonorStatus
from tests.factories import configure_paypal, seed_donor, seed_invite, seed_prospect
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestGetShareLink:
    """Tests for the public share link projection."""

    @pytest.mark.asyncio
    async def test_donor_projection(self, unit_env):
        """Should expose the donor, the active invite and checkout context."""
        # Arrange
        await configure_paypal(unit_env, subscriptionPrice="5", currency="EUR")
        donor, link = await seed_donor(unit_env, name="Dee")
        invite = await seed_invite(unit_env, donor, "friend@example.com")
        use_case = await unit_env.get(GetShareLinkUseCase)

        # Act
        projection = await use_case.execute(GetShareLinkRequest(token=link.token))

        # Assert
        assert projection.donor.name == "Dee"
        assert projection.invite.id == str(invite.id)
        assert projection.share_link.session_token == link.session_token
        assert projection.paypal.plan_id == "P-1"
        assert projection.paypal.subscription_price == 5.0
        assert projection.paypal.checkout_url.endswith("plan_id=P-1")
        body = projection.model_dump(by_alias=True)
        assert "shareLink" in body
        assert "passwordHash" not in body["donor"]

    @pytest.mark.asyncio
    async def test_prospect_projection(self, unit_env):
        _, link = await seed_prospect(unit_env)
        use_case = await unit_env.get(GetShareLinkUseCase)

        projection = await use_case.execute(GetShareLinkRequest(token=link.token))

        assert projection.donor is None
        assert projection.prospect.email == "future@example.com"
        assert projection.paypal.checkout_url is None

    @pytest.mark.asyncio
    async def test_blocked_donor(self, unit_env):
        """Ended subscriptions should be refused."""
        _, link = await seed_donor(unit_env, status=DonorStatus.EXPIRED)
        use_case = await unit_env.get(GetShareLinkUseCase)

        with pytest.raises(ForbiddenError) as exc_info:
            await use_case.execute(GetShareLinkRequest(token=link.token))
        assert exc_info.value.details == {"status": "expired"}

    @pytest.mark.asyncio
    async def test_unknown_token(self, unit_env):
        use_case = await unit_env.get(GetShareLinkUseCase)

        with pytest.raises(NotFoundError):
            await use_case.execute(GetShareLinkRequest(token="nope"))
