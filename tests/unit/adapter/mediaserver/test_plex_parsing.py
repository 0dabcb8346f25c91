"""Unit tests for Plex payload parsing."""

from donorlink.adapter.mediaserver import (
    ResourceAmbiguous,
    ResourceEmpty,
    ResourceMatch,
    parse_resources,
    parse_server_sections,
    resolve_owned_server,
)
from donorlink.adapter.mediaserver.parsing import (
    extract_error_message,
    find_server_entry,
    map_invite_response,
    parse_invited_id,
    parse_library_sections,
    parse_server_list,
    split_ids,
)

RESOURCES_XML = """
<MediaContainer size="2">
  <Device name="Home" provides="server" clientIdentifier="abc-123" owned="1">
    <Connection uri="http://10.0.0.2:32400"/>
  </Device>
  <Device name="Phone" provides="client,player" clientIdentifier="phone-1" owned="1"/>
</MediaContainer>
"""


class TestResources:
    """Tests for resource parsing and owned-server resolution."""

    def test_parse_resources_xml(self):
        """Should read devices and their connections from XML."""
        devices = parse_resources(RESOURCES_XML)

        assert [device.name for device in devices] == ["Home", "Phone"]
        assert devices[0].is_server and devices[0].is_owned
        assert devices[0].connections == ["http://10.0.0.2:32400"]
        assert not devices[1].is_server

    def test_parse_resources_json_container(self):
        """Should read the JSON MediaContainer form."""
        devices = parse_resources(
            '{"MediaContainer": {"Device": {"name": "Home", "provides": "server", '
            '"owned": true, "clientIdentifier": "abc"}}}'
        )

        assert len(devices) == 1
        assert devices[0].is_owned

    def test_resolve_matches_identifier_without_dashes(self):
        """Should compare identifiers case-insensitively without dashes."""
        devices = parse_resources(RESOURCES_XML)

        resolution = resolve_owned_server(devices, "ABC123")

        assert isinstance(resolution, ResourceMatch)
        assert resolution.device.client_identifier == "abc-123"

    def test_resolve_single_owned_server_without_identifier(self):
        """Should accept the only owned server."""
        resolution = resolve_owned_server(parse_resources(RESOURCES_XML), None)

        assert isinstance(resolution, ResourceMatch)

    def test_resolve_empty(self):
        """Should explain when no owned server exists."""
        devices = parse_resources(
            '[{"name": "Shared", "provides": "server", "owned": "0"}]'
        )

        resolution = resolve_owned_server(devices, None)

        assert isinstance(resolution, ResourceEmpty)
        assert "owned" in resolution.reason

    def test_resolve_ambiguous(self):
        """Should list candidates when several owned servers match nothing."""
        devices = parse_resources(
            '[{"name": "A", "provides": "server", "owned": 1, "clientIdentifier": "a"},'
            ' {"name": "B", "provides": "server", "owned": 1, "clientIdentifier": "b"}]'
        )

        resolution = resolve_owned_server(devices, "zzz")

        assert isinstance(resolution, ResourceAmbiguous)
        assert len(resolution.candidates) == 2


class TestServerList:
    """Tests for legacy server list parsing."""

    def test_find_legacy_id(self):
        """Should find the numeric id by machine identifier."""
        servers = parse_server_list(
            '<MediaContainer><Server id="42" machineIdentifier="abc-123" name="Home"/>'
            "</MediaContainer>"
        )

        entry = find_server_entry(servers, "ABC123")

        assert entry is not None
        assert entry.id == "42"


class TestSections:
    """Tests for section catalogs and library lists."""

    def test_catalog_resolves_keys_and_paths(self):
        """Should map section keys and paths onto canonical ids."""
        catalog = parse_server_sections(
            '{"MediaContainer": {"Server": [{"Section": ['
            '{"id": "101", "key": "/library/sections/1"},'
            '{"id": "102", "key": "2"}]}]}}'
        )

        assert catalog.available_ids() == ["101", "102"]
        assert catalog.resolve("1") == "101"
        assert catalog.resolve("/library/sections/1?x=y") == "101"
        assert catalog.resolve("102") == "102"
        assert catalog.resolve("9") is None

    def test_catalog_from_xml(self):
        """Should read sections from XML attributes."""
        catalog = parse_server_sections(
            '<MediaContainer><Server><Section id="7" key="3"/></Server></MediaContainer>'
        )

        assert catalog.available_ids() == ["7"]
        assert catalog.resolve("3") == "7"

    def test_library_sections(self):
        """Should de-duplicate libraries and title them by id when untitled."""
        libraries = parse_library_sections(
            '{"MediaContainer": {"Directory": ['
            '{"key": "1", "title": "Movies"}, {"key": "1", "title": "Dup"},'
            '{"key": "/library/sections/2"}]}}'
        )

        assert [(lib.id, lib.title) for lib in libraries] == [("1", "Movies"), ("2", "2")]

    def test_split_ids(self):
        """Should split comma strings and trim entries."""
        assert split_ids(" 1, 2 ,,3") == ["1", "2", "3"]
        assert split_ids(["4", " "]) == ["4"]
        assert split_ids(None) == []


class TestInvitedId:
    """Tests for parse_invited_id."""

    def test_json_user_by_email(self):
        """Should return the id of the user whose email matches."""
        payload = '{"users": [{"email": "other@example.com", "id": 1}, {"email": "Friend@Example.com", "id": 555}]}'

        assert parse_invited_id(payload, "friend@example.com") == "555"

    def test_regex_fallback(self):
        """Should fall back to an invitedId anywhere in the text."""
        payload = '{"result": {"meta": {"invitedId": "uuid-9"}}}'

        assert parse_invited_id(payload, "nobody@example.com") == "uuid-9"

    def test_xml_home_user(self):
        """Should read XML home users."""
        payload = '<MediaContainer><User id="77" email="friend@example.com"/></MediaContainer>'

        assert parse_invited_id(payload, "friend@example.com") == "77"


class TestInviteResponse:
    """Tests for map_invite_response and error text."""

    def test_map_nested_invitation(self):
        """Should read the nested invitation object."""
        invite = map_invite_response(
            {
                "invitation": {
                    "id": 9001,
                    "status": "pending",
                    "createdAt": 1767225600,
                    "libraries": [{"id": 1, "title": "Movies"}],
                }
            }
        )

        assert invite.invite_id == "9001"
        assert invite.status == "pending"
        assert invite.invited_at == "2026-01-01T00:00:00.000Z"
        assert invite.shared_libraries[0].title == "Movies"

    def test_extract_error_message(self):
        """Should drop HTML bodies and truncate long ones."""
        assert extract_error_message("<html>oops</html>") == ""
        assert extract_error_message(" bad token ") == "bad token"
        long_message = extract_error_message("x" * 400)
        assert len(long_message) == 300
        assert long_message.endswith("...")
