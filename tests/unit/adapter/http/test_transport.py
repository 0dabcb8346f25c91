"""Unit tests for the transport layer."""

import pytest

from donorlink.adapter.error import TransportError
from donorlink.adapter.http import ScriptedTransport, TransportResponse
from donorlink.adapter.http.transport import redact_url


class TestTransportResponse:
    """Tests for TransportResponse."""

    def test_ok_range(self):
        """Only 2xx statuses should be ok."""
        assert TransportResponse(status=204).ok
        assert not TransportResponse(status=302).ok
        assert not TransportResponse(status=404).ok

    def test_details_prefers_json(self):
        """Should parse JSON and fall back to raw text."""
        assert TransportResponse(status=400, text='{"error": "bad"}').details() == {
            "error": "bad"
        }
        assert TransportResponse(status=500, text="<html>").details() == "<html>"
        assert TransportResponse(status=500).details() is None


class TestRedactUrl:
    """Tests for redact_url."""

    def test_strips_query(self):
        """Should drop tokens carried in the query string."""
        assert (
            redact_url("https://plex.tv/api/resources?X-Plex-Token=abc#frag")
            == "https://plex.tv/api/resources"
        )


class TestScriptedTransport:
    """Tests for ScriptedTransport."""

    @pytest.mark.asyncio
    async def test_first_matching_route_answers(self):
        """Should answer from the first route matching method and URL."""
        # Arrange
        transport = ScriptedTransport()
        transport.add(201, {"a": 1}, method="POST", match="/x")
        transport.add(200, "plain", match="/x")

        # Act
        post = await transport.request("POST", "https://h/x")
        get = await transport.request("GET", "https://h/x")
        missing = await transport.request("GET", "https://h/y")

        # Assert
        assert post.status == 201
        assert post.json_body() == {"a": 1}
        assert get.text == "plain"
        assert missing.status == 404
        assert len(transport.calls_to("/x")) == 2
        assert len(transport.calls_to("/x", method="POST")) == 1

    @pytest.mark.asyncio
    async def test_times_limits_route(self):
        """A route with times should stop answering once used up."""
        # Arrange
        transport = ScriptedTransport()
        transport.add(500, times=1)
        transport.add(200)

        # Act
        first = await transport.request("GET", "https://h/")
        second = await transport.request("GET", "https://h/")

        # Assert
        assert (first.status, second.status) == (500, 200)

    @pytest.mark.asyncio
    async def test_error_route_raises(self):
        """Should raise TransportError for error routes."""
        transport = ScriptedTransport().add(error="timed out")

        with pytest.raises(TransportError, match="timed out"):
            await transport.request("GET", "https://h/")
