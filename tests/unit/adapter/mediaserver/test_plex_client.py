"""Unit tests for PlexClient."""

import pytest

from donorlink.adapter.error import (
    MediaServerRequestFailed,
    MediaServerUnauthorized,
    ProviderNotConfiguredError,
    RecipientNotFound,
)
from donorlink.adapter.http import ScriptedTransport
from donorlink.adapter.mediaserver import MediaServerCache, PlexClient, ServerDescriptor
from donorlink.domain.model.settings import MediaServerSettings

SETTINGS = MediaServerSettings(
    base_url="http://plex.local:32400", token="tok", server_identifier="abc-123"
)

RESOURCES = [
    {
        "name": "Home",
        "provides": "server",
        "owned": "1",
        "clientIdentifier": "abc-123",
        "connections": [{"uri": "http://plex.local:32400"}],
    }
]
SECTIONS = {
    "MediaContainer": {
        "Server": [{"Section": [{"id": "101", "key": "1"}, {"id": "102", "key": "2"}]}]
    }
}


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def cache():
    return MediaServerCache()


@pytest.fixture
def client(transport, cache):
    return PlexClient(transport, cache)


def script_discovery(transport: ScriptedTransport) -> None:
    transport.add(200, RESOURCES, match="/api/resources")
    transport.add(200, SECTIONS, match="/api/servers/abc-123")
    transport.add(
        200,
        '<MediaContainer><Server id="42" machineIdentifier="abc-123"/></MediaContainer>',
        match="/api/servers",
    )


class TestResolveServer:
    """Tests for PlexClient.resolve_server."""

    @pytest.mark.asyncio
    async def test_resolves_and_caches(self, transport, client):
        """Should resolve the descriptor once and serve it from cache."""
        # Arrange
        script_discovery(transport)

        # Act
        first = await client.resolve_server(SETTINGS)
        calls = len(transport.calls)
        second = await client.resolve_server(SETTINGS)

        # Assert
        assert first.machine_identifier == "abc-123"
        assert first.legacy_numeric_id == "42"
        assert second == first
        assert len(transport.calls) == calls
        assert transport.calls[0].headers["X-Plex-Token"] == "tok"

    @pytest.mark.asyncio
    async def test_matches_base_url_host_without_identifier(self, transport, client):
        """Should pick the owned server reachable at the base URL's host."""
        script_discovery(transport)
        settings = SETTINGS.model_copy(update={"server_identifier": ""})

        descriptor = await client.resolve_server(settings)

        assert descriptor.client_identifier == "abc-123"

    @pytest.mark.asyncio
    async def test_legacy_id_is_optional(self, transport, client):
        """Should resolve without a legacy id when the server list fails."""
        transport.add(200, RESOURCES, match="/api/resources")
        transport.add(500, "down", match="/api/servers")

        descriptor = await client.resolve_server(SETTINGS)

        assert descriptor.legacy_numeric_id is None

    @pytest.mark.asyncio
    async def test_rejected_token(self, transport, client):
        """Should raise MediaServerUnauthorized on 401."""
        transport.add(401)

        with pytest.raises(MediaServerUnauthorized):
            await client.resolve_server(SETTINGS)

    @pytest.mark.asyncio
    async def test_cache_reset_on_settings_change(self, transport, cache, client):
        """Saving the mediaServer group should clear discovered state."""
        script_discovery(transport)
        await client.resolve_server(SETTINGS)

        cache.settings_changed("portal")
        assert cache.server_descriptors
        cache.settings_changed("mediaServer")
        assert not cache.server_descriptors


class TestCancelInvite:
    """Tests for PlexClient.cancel_invite."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 410])
    async def test_missing_invite_is_not_an_error(
        self, status, transport, cache, client
    ):
        """A 404 or 410 should report the invite as not found instead of raising."""
        # Arrange
        cache.set_descriptor(
            "tok",
            "abc-123",
            ServerDescriptor(machine_identifier="abc-123", legacy_numeric_id="42"),
        )
        transport.add(status, method="DELETE", match="/shared_servers/INV-MISSING")

        # Act
        result = await client.cancel_invite(SETTINGS, "INV-MISSING")

        # Assert
        assert result.success is False
        assert result.reason == "Invite not found on Plex server"
        assert "/api/servers/42/shared_servers/INV-MISSING" in transport.calls[0].url

    @pytest.mark.asyncio
    async def test_requires_legacy_id(self, cache, client):
        """Should refuse when the server has no legacy numeric id."""
        cache.set_descriptor("tok", "abc-123", ServerDescriptor(machine_identifier="abc-123"))

        with pytest.raises(MediaServerRequestFailed):
            await client.cancel_invite(SETTINGS, "INV-1")


class TestRevokeUser:
    """Tests for PlexClient.revoke_user."""

    @pytest.mark.asyncio
    async def test_removes_matching_user(self, transport, cache, client):
        """Should find the user by email and delete them."""
        # Arrange
        transport.add(404, method="GET", match="/accounts")
        transport.add(
            200,
            {"users": [{"id": 7, "email": "Donor@Example.com"}]},
            method="GET",
            match="/api/v2/home/users",
        )
        transport.add(200, method="DELETE", match="/api/v2/home/users/7")

        # Act
        result = await client.revoke_user(SETTINGS, email="donor@example.com")

        # Assert
        assert result.success
        assert cache.get_user_list_path("http://plex.local:32400") == "/api/v2/home/users"
        assert transport.calls_to("/api/v2/home/users/7", method="DELETE")

    @pytest.mark.asyncio
    async def test_unknown_user(self, transport, client):
        """Should report a missing user without raising."""
        transport.add(200, {"MediaContainer": {"Account": []}}, method="GET", match="/accounts")

        result = await client.revoke_user(SETTINGS, email="nobody@example.com")

        assert not result.success
        assert result.reason == "User not found on Plex server"

    @pytest.mark.asyncio
    async def test_unconfigured_is_skipped(self, transport, client):
        """Should skip without calling Plex when unconfigured."""
        result = await client.revoke_user(MediaServerSettings(), email="a@example.com")

        assert result.skipped
        assert transport.calls == []


class TestCreateInvite:
    """Tests for PlexClient.create_invite."""

    @pytest.mark.asyncio
    async def test_shares_configured_sections(self, transport, client):
        """Should share the configured sections with the invitee."""
        # Arrange
        script_discovery(transport)
        transport.add(
            200,
            {"users": [{"email": "friend@example.com", "id": 555}]},
            match="/api/home/users",
        )
        transport.add(
            201,
            {"invitation": {"id": 9001, "status": "pending"}},
            method="POST",
            match="/api/v2/shared_servers",
        )
        settings = SETTINGS.model_copy(update={"library_section_ids": "1"})

        # Act
        invite = await client.create_invite(settings, "friend@example.com")

        # Assert
        assert invite.invite_id == "9001"
        body = transport.calls_to("/api/v2/shared_servers", method="POST")[0].body
        assert body["machineIdentifier"] == "abc-123"
        assert body["librarySectionIds"] == ["101"]
        assert body["invitedId"] == "555"
        assert body["settings"] == {
            "allowSync": "0",
            "allowCameraUpload": "0",
            "allowChannels": "0",
        }

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, transport, client):
        """Should raise RecipientNotFound when Plex has no such account."""
        script_discovery(transport)
        transport.add(404, match="/api/home/users")

        with pytest.raises(RecipientNotFound):
            await client.create_invite(SETTINGS, "ghost@example.com")

    @pytest.mark.asyncio
    async def test_not_configured(self, client):
        """Should refuse to run without base URL and token."""
        with pytest.raises(ProviderNotConfiguredError):
            await client.create_invite(MediaServerSettings(), "a@example.com")


class TestVerifyConnection:
    """Tests for PlexClient.verify_connection."""

    @pytest.mark.asyncio
    async def test_reports_libraries(self, transport, client):
        """Should report resolved server details and libraries."""
        # Arrange
        transport.add(200, {}, match="/api/servers/42/shared_servers")
        script_discovery(transport)
        transport.add(
            200,
            {"MediaContainer": {"Directory": [{"key": "1", "title": "Movies"}]}},
            match="/library/sections",
        )

        # Act
        report = await client.verify_connection(SETTINGS)

        # Assert
        assert report.details["serverIdentifier"] == "abc-123"
        assert report.details["inviteEndpointVersion"] == "legacy"
        assert report.libraries == [{"id": "101", "title": "Movies"}]
