"""Unit tests for AccessController."""

import pytest

from donorlink.adapter.error import PortalServerSelectionRequired
from donorlink.adapter.http import ScriptedTransport
from donorlink.application.usecase.lifecycle import AccessController
from donorlink.domain.repository import EventRepository
from donorlink.domain.service import InviteService
from tests.factories import configure_portal, seed_donor, seed_invite
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestEnsureInvite:
    """Tests for ensure_invite."""

    @pytest.mark.asyncio
    async def test_server_selection_is_logged_for_admins(self, unit_env):
        """An ambiguous portal should raise and leave an audit event."""
        # Arrange
        await configure_portal(unit_env)
        donor, _ = await seed_donor(unit_env)
        transport = await unit_env.get(ScriptedTransport)
        transport.add(
            400,
            {
                "available_servers": [
                    {"id": 1, "name": "A", "server_type": "plex"},
                    {"id": 2, "name": "B", "server_type": "jellyfin"},
                ]
            },
            method="POST",
        )
        access_controller = await unit_env.get(AccessController)

        # Act
        with pytest.raises(PortalServerSelectionRequired) as exc_info:
            await access_controller.ensure_invite(donor)

        # Assert
        assert len(exc_info.value.servers) == 2
        events = await unit_env.get(EventRepository)
        logged = events.of_type("invite.server_selection_required")
        assert [server["name"] for server in logged[0].payload["servers"]] == ["A", "B"]
        invite_service = await unit_env.get(InviteService)
        assert await invite_service.list_active(donor.id) == []


class TestRevokeAccess:
    """Tests for revoke_access."""

    @pytest.mark.asyncio
    async def test_portal_failure_does_not_abort(self, unit_env):
        """A failing portal delete should be reported while the invite is revoked."""
        # Arrange
        await configure_portal(unit_env)
        donor, _ = await seed_donor(unit_env)
        invite = await seed_invite(unit_env, donor, "friend@example.com")
        transport = await unit_env.get(ScriptedTransport)
        transport.add(500, "down", method="DELETE")
        access_controller = await unit_env.get(AccessController)

        # Act
        report = await access_controller.revoke_access(donor, "test")

        # Assert
        assert report.revoked_invite_ids == [str(invite.id)]
        assert report.portal_failures == [invite.code]
        assert report.media_server["skipped"] is True
        assert report.cancellation_email_sent is False

    @pytest.mark.asyncio
    async def test_revoking_twice_is_harmless(self, unit_env):
        """The second revocation should find nothing left to revoke."""
        await configure_portal(unit_env)
        donor, _ = await seed_donor(unit_env)
        await seed_invite(unit_env, donor, "friend@example.com")
        transport = await unit_env.get(ScriptedTransport)
        transport.add(404, method="DELETE")
        access_controller = await unit_env.get(AccessController)

        first = await access_controller.revoke_access(donor, "test", notify=False)
        second = await access_controller.revoke_access(donor, "test", notify=False)

        assert len(first.revoked_invite_ids) == 1
        assert first.portal_failures == []
        assert second.revoked_invite_ids == []
