"""Unit tests for InviteService."""

import pytest

from donorlink.adapter.http import ScriptedTransport
from donorlink.domain.model.settings import PortalSettings
from donorlink.domain.service import DonorService, InviteService
from donorlink.domain.value import PortalInvite
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

PORTAL = PortalSettings(base_url="https://portal.example.com", api_key="key")


async def make_invite(unit_env, recipient="friend@example.com"):
    donor_service = await unit_env.get(DonorService)
    invite_service = await unit_env.get(InviteService)
    donor = await donor_service.create_donor("donor@example.com")
    invite = await invite_service.record_invite(
        donor,
        PortalInvite(invite_code="ABCD1234", invite_url="https://portal.example.com/j/ABCD1234"),
        recipient,
    )
    return donor, invite


class TestRecordInvite:
    """Tests for record_invite and reuse lookup."""

    @pytest.mark.asyncio
    async def test_record_invite_lowercases_recipient(self, unit_env):
        """Recorded invites should be active with a lowercase recipient."""
        # Arrange / Act
        donor, invite = await make_invite(unit_env, "Friend@Example.com")
        invite_service = await unit_env.get(InviteService)

        # Assert
        assert invite.recipient_email == "friend@example.com"
        assert invite.is_active
        assert (await invite_service.get_latest_active(donor.id)).id == invite.id

    @pytest.mark.asyncio
    async def test_find_reusable_matches_case_insensitively(self, unit_env):
        """The active invite should be reusable for the same recipient only."""
        donor, invite = await make_invite(unit_env)
        invite_service = await unit_env.get(InviteService)

        assert (await invite_service.find_reusable(donor.id, "FRIEND@example.com")).id == invite.id
        assert await invite_service.find_reusable(donor.id, "other@example.com") is None

    @pytest.mark.asyncio
    async def test_revoked_invite_is_not_reusable(self, unit_env):
        donor, invite = await make_invite(unit_env)
        invite_service = await unit_env.get(InviteService)

        await invite_service.mark_revoked(invite)

        assert await invite_service.find_reusable(donor.id, "friend@example.com") is None


class TestMarkRevoked:
    """Tests for mark_revoked."""

    @pytest.mark.asyncio
    async def test_mark_revoked_is_idempotent(self, unit_env):
        """Revoking twice should keep the first revocation time."""
        # Arrange
        _, invite = await make_invite(unit_env)
        invite_service = await unit_env.get(InviteService)

        # Act
        first = await invite_service.mark_revoked(invite)
        second = await invite_service.mark_revoked(first)

        # Assert
        assert first.revoked_at is not None
        assert second.revoked_at == first.revoked_at


class TestPortalCalls:
    """Tests for portal delegation."""

    @pytest.mark.asyncio
    async def test_create_portal_invite_uses_portal(self, unit_env):
        """Should return the normalized portal invite."""
        # Arrange
        transport = await unit_env.get(ScriptedTransport)
        transport.add(201, {"code": "WXYZ5678"}, method="POST")
        invite_service = await unit_env.get(InviteService)

        # Act
        created = await invite_service.create_portal_invite(
            PORTAL, "friend@example.com", note="Shared by donor@example.com"
        )

        # Assert
        assert created.invite_code == "WXYZ5678"
        assert created.invite_url.endswith("WXYZ5678")
        assert transport.calls[0].body["email"] == "friend@example.com"
