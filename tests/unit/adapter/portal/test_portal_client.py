"""Unit tests for HttpPortalClient."""

import re

import pytest

from donorlink.adapter.error import (
    PortalRequestFailed,
    PortalServerSelectionRequired,
    PortalUnauthorized,
    PortalUnreachable,
    ProviderNotConfiguredError,
)
from donorlink.adapter.http import ScriptedTransport
from donorlink.adapter.portal import HttpPortalClient
from donorlink.domain.model.settings import PortalSettings
from donorlink.domain.value import PortalInviteRequest

SETTINGS = PortalSettings(base_url="https://portal.example.com", api_key="key")
CREATE_PATH = "/api/v1/invitations"


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def client(transport):
    return HttpPortalClient(transport)


class TestCreateInvite:
    """Tests for HttpPortalClient.create_invite."""

    @pytest.mark.asyncio
    async def test_creates_invite_with_generated_code(self, transport, client):
        """Should send a generated code and use the portal's answer."""
        # Arrange
        transport.add(201, {"invite_code": "PORTAL1", "url": "https://p/i/PORTAL1"})

        # Act
        invite = await client.create_invite(
            SETTINGS, PortalInviteRequest(email="a@example.com", note="hi")
        )

        # Assert
        assert invite.invite_code == "PORTAL1"
        assert invite.invite_url == "https://p/i/PORTAL1"
        sent = transport.calls[0]
        assert sent.url == f"https://portal.example.com{CREATE_PATH}"
        assert re.fullmatch(r"[A-Z0-9]{10}", sent.body["code"])
        assert sent.body["email"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_synthesizes_url_when_missing(self, transport, client):
        """Should build the invite URL from the base when none is returned."""
        transport.add(200, {"code": "XYZ"})
        settings = SETTINGS.model_copy(
            update={"base_url": "https://portal.example.com/api/v1"}
        )

        invite = await client.create_invite(settings, PortalInviteRequest(code="XYZ"))

        assert invite.invite_url == "https://portal.example.com/invite/XYZ"

    @pytest.mark.asyncio
    async def test_ambiguous_servers_require_selection(self, transport, client):
        """Should raise with every offered server when several are offered."""
        # Arrange
        transport.add(
            400,
            {
                "error": "Server selection required",
                "available_servers": [
                    {"id": 1, "name": "A", "server_type": "plex"},
                    {"id": 2, "name": "B", "server_type": "jellyfin"},
                ],
            },
        )

        # Act / Assert
        with pytest.raises(PortalServerSelectionRequired) as exc_info:
            await client.create_invite(SETTINGS, PortalInviteRequest(email="a@example.com"))

        error = exc_info.value
        assert [server.id for server in error.servers] == [1, 2]
        assert [server.name for server in error.servers] == ["A", "B"]
        assert "A • PLEX (1)" in error.message
        assert error.kind == "upstream_configuration_required"
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_single_server_is_retried_automatically(self, transport, client):
        """Should retry once with the only offered server."""
        # Arrange
        transport.add(
            422, {"available_servers": [{"id": 5, "name": "Only"}]}, times=1
        )
        transport.add(201, {"code": "OK1"})

        # Act
        invite = await client.create_invite(SETTINGS, PortalInviteRequest())

        # Assert
        assert invite.invite_code == "OK1"
        assert transport.calls[-1].body["server"] == "5"

    @pytest.mark.asyncio
    async def test_single_server_already_sent_is_not_retried(self, transport, client):
        """Should fail instead of retrying with the server it already sent."""
        transport.add(400, {"error": "bad server", "available_servers": [{"id": 5}]})
        settings = SETTINGS.model_copy(update={"default_server_ids": "5"})

        with pytest.raises(PortalRequestFailed) as exc_info:
            await client.create_invite(settings, PortalInviteRequest())

        assert "bad server" in exc_info.value.message
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_rejected_key(self, transport, client):
        """Should raise PortalUnauthorized after every strategy is rejected."""
        transport.add(401)

        with pytest.raises(PortalUnauthorized):
            await client.create_invite(SETTINGS, PortalInviteRequest())

    @pytest.mark.asyncio
    async def test_no_endpoint(self, transport, client):
        """Should raise PortalUnreachable when every path misses."""
        with pytest.raises(PortalUnreachable) as exc_info:
            await client.create_invite(SETTINGS, PortalInviteRequest())

        assert "endpoint was not found" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_not_configured(self, client):
        """Should refuse to run without base URL and key."""
        with pytest.raises(ProviderNotConfiguredError):
            await client.create_invite(PortalSettings(), PortalInviteRequest())


class TestRevokeInvite:
    """Tests for HttpPortalClient.revoke_invite."""

    @pytest.mark.asyncio
    async def test_deletes_by_code(self, transport, client):
        """Should DELETE the invite under the first answering base."""
        transport.add(204, method="DELETE")

        await client.revoke_invite(SETTINGS, "ABC 1")

        assert transport.calls[0].method == "DELETE"
        assert transport.calls[0].url.endswith("/api/v1/invitations/ABC%201")

    @pytest.mark.asyncio
    async def test_missing_invite_is_not_an_error(self, transport, client):
        """Should treat 404 on every path as already revoked."""
        await client.revoke_invite(SETTINGS, "GONE")

        assert transport.calls

    @pytest.mark.asyncio
    async def test_portal_error(self, transport, client):
        """Should raise on a non-OK answer."""
        transport.add(500, "boom")

        with pytest.raises(PortalRequestFailed):
            await client.revoke_invite(SETTINGS, "ABC")


class TestVerifyConnection:
    """Tests for HttpPortalClient.verify_connection."""

    @pytest.mark.asyncio
    async def test_validation_error_means_key_accepted(self, transport, client):
        """A 400 should count as a successful connection test."""
        transport.add(400, {"error": "duplicate code"})

        report = await client.verify_connection(SETTINGS)

        assert report.status == 400
        assert "accepted" in report.message

    @pytest.mark.asyncio
    async def test_rejected_key(self, transport, client):
        """Should raise when the key is rejected."""
        transport.add(403)

        with pytest.raises(PortalUnauthorized):
            await client.verify_connection(SETTINGS)
