"""Parsers for Plex payloads.

plex.tv and Plex Media Server answer in JSON or XML depending on the endpoint
and the ``Accept`` header they honour, so every parser accepts both.
"""

import json
import re
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from donorlink.adapter.http.urls import normalize_id
from donorlink.domain.value import MediaInvite, SharedLibrary

HOME_USER_EMAIL_KEYS = (
    "email",
    "username",
    "title",
    "friendlyname",
    "friendly_name",
    "name",
    "invitedemail",
    "invited_email",
)
HOME_USER_ID_KEYS = (
    "invitedid",
    "invited_id",
    "homeuserid",
    "home_user_id",
    "userid",
    "user_id",
    "useruuid",
    "user_uuid",
    "uuid",
    "id",
    "accountid",
    "account_id",
    "machineidentifier",
    "machine_id",
    "machineid",
)
TRUTHY = ("1", "true", "yes")
MAX_ERROR_LENGTH = 300

_INVITED_ID_PATTERNS = (
    re.compile(r'"invited(?:Id|_id)"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"invited(?:Id|_id)"\s*:\s*([\w:-]+)', re.IGNORECASE),
)
_SECTION_NUMBER = re.compile(r"(?:^|/)(\d+)$")
_LEADING_NON_DIGITS = re.compile(r"^\D*")


def as_list(value: Any) -> list[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def split_ids(value: Any) -> list[str]:
    """Comma-separated string or list into trimmed non-empty strings."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        entries = [str(entry) for entry in value]
    else:
        entries = str(value).split(",")
    return [entry.strip() for entry in entries if entry.strip()]


def _parse_json(payload: str) -> Any:
    try:
        return json.loads(payload)
    except ValueError:
        return None


def _parse_xml(payload: str) -> ET.Element | None:
    try:
        return ET.fromstring(payload)
    except ET.ParseError:
        return None


def _elements(root: ET.Element | None, tag: str) -> list[ET.Element]:
    if root is None:
        return []
    return [element for element in root.iter() if element.tag.lower() == tag.lower()]


def extract_error_message(text: str) -> str:
    """Provider message fit for an error, or "" when it is HTML or empty."""
    trimmed = (text or "").strip()
    if not trimmed or trimmed.startswith("<"):
        return ""
    if len(trimmed) > MAX_ERROR_LENGTH:
        return f"{trimmed[: MAX_ERROR_LENGTH - 3]}..."
    return trimmed


def is_owned(value: Any) -> bool:
    if value is True or value == 1:
        return True
    return str(value or "").strip().lower() in TRUTHY


# =============================================================================
# RESOURCES
# =============================================================================


class PlexDevice(BaseModel):
    """A device from the account resource catalog."""

    name: str = "unknown"
    provides: str = ""
    client_identifier: str | None = None
    machine_identifier: str | None = None
    owned: str | None = None
    connections: list[str] = Field(default_factory=list)

    @property
    def is_server(self) -> bool:
        return "server" in self.provides

    @property
    def is_owned(self) -> bool:
        return is_owned(self.owned)


def _device_from_mapping(device: dict[str, Any], connections: list[Any]) -> PlexDevice:
    uris: list[str] = []
    for connection in connections:
        if isinstance(connection, dict):
            uri = (
                connection.get("uri")
                or connection.get("address")
                or connection.get("host")
                or connection.get("relay")
            )
            if uri:
                uris.append(str(uri))
    owned = device.get("owned")
    return PlexDevice(
        name=str(
            device.get("name") or device.get("product") or device.get("device") or "unknown"
        ),
        provides=str(device.get("provides") or "").lower(),
        client_identifier=device.get("clientIdentifier") or None,
        machine_identifier=device.get("machineIdentifier") or None,
        owned=None if owned is None else str(owned).strip().lower(),
        connections=uris,
    )


def parse_resources(payload: str) -> list[PlexDevice]:
    """Devices from ``/api/resources`` (JSON list, JSON container or XML)."""
    trimmed = (payload or "").strip()
    if not trimmed:
        return []

    data = _parse_json(trimmed)
    if isinstance(data, dict):
        data = as_list((data.get("MediaContainer") or {}).get("Device"))
    if isinstance(data, list):
        return [
            _device_from_mapping(
                device, as_list(device.get("connections") or device.get("Connection"))
            )
            for device in data
            if isinstance(device, dict)
        ]

    return [
        _device_from_mapping(
            dict(element.attrib),
            [dict(child.attrib) for child in _elements(element, "Connection")],
        )
        for element in _elements(_parse_xml(trimmed), "Device")
    ]


class ResourceMatch(BaseModel):
    kind: Literal["match"] = "match"
    device: PlexDevice


class ResourceEmpty(BaseModel):
    kind: Literal["empty"] = "empty"
    reason: str


class ResourceAmbiguous(BaseModel):
    kind: Literal["ambiguous"] = "ambiguous"
    candidates: list[PlexDevice]


ResourceResolution = Annotated[
    ResourceMatch | ResourceEmpty | ResourceAmbiguous, Field(discriminator="kind")
]


def resolve_owned_server(
    devices: list[PlexDevice], server_identifier: str | None
) -> ResourceResolution:
    """Pick the owned server matching the configured identifier.

    Identifiers are compared lowercase without dashes. Without a match, a
    single owned server is accepted.
    """
    servers = [device for device in devices if device.is_server]
    if not servers:
        return ResourceEmpty(
            reason=(
                "No Plex servers were returned from /api/resources. Confirm the "
                "token owns the server and that it is published."
            )
        )

    owned = [device for device in servers if device.is_owned]
    if not owned:
        return ResourceEmpty(
            reason=(
                "/api/resources did not return any owned Plex servers. Ensure "
                "the server is claimed by this account."
            )
        )

    wanted = normalize_id(server_identifier)
    if wanted:
        for device in owned:
            if wanted in (
                normalize_id(device.client_identifier),
                normalize_id(device.machine_identifier),
            ):
                return ResourceMatch(device=device)

    if len(owned) == 1:
        return ResourceMatch(device=owned[0])
    return ResourceAmbiguous(candidates=owned)


# =============================================================================
# SERVER LIST
# =============================================================================


class PlexServerEntry(BaseModel):
    """An entry from ``/api/servers``."""

    id: str | None = None
    machine_identifier: str | None = None
    client_identifier: str | None = None
    uuid: str | None = None
    provides: str = "server"
    name: str = "unknown"

    def identifiers(self) -> list[str | None]:
        return [self.machine_identifier, self.client_identifier, self.uuid, self.id]


def _first_value(entry: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = entry.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _server_entry(entry: dict[str, Any]) -> PlexServerEntry | None:
    server_id = _first_value(entry, "id", "serverID", "serverId", "server_id", "serverid")
    machine = _first_value(
        entry,
        "machineIdentifier",
        "machine_identifier",
        "machineID",
        "machineid",
        "machine_id",
        "uuid",
        "clientIdentifier",
        "clientidentifier",
        "client_id",
        "clientID",
    )
    client = _first_value(entry, "clientIdentifier", "clientidentifier", "client_id", "clientID")
    uuid = _first_value(entry, "uuid")
    if not (server_id or machine or client or uuid):
        return None
    return PlexServerEntry(
        id=server_id,
        machine_identifier=machine,
        client_identifier=client,
        uuid=uuid,
        provides=_first_value(entry, "provides") or "server",
        name=_first_value(entry, "name", "friendlyName", "device") or "unknown",
    )


def _flatten_servers(value: Any) -> list[dict[str, Any]]:
    flattened: list[dict[str, Any]] = []
    for entry in as_list(value):
        if not isinstance(entry, dict):
            continue
        nested = entry.get("Server") or entry.get("server")
        if nested:
            flattened.extend(_flatten_servers(nested))
        else:
            flattened.append(entry)
    return flattened


def parse_server_list(payload: str) -> list[PlexServerEntry]:
    """Servers from ``/api/servers`` (JSON or XML)."""
    trimmed = (payload or "").strip()
    if not trimmed:
        return []

    data = _parse_json(trimmed)
    raw: list[dict[str, Any]] = []
    if isinstance(data, list):
        raw = [entry for entry in data if isinstance(entry, dict)]
    elif isinstance(data, dict):
        container = (
            data.get("MediaContainer") or data.get("mediaContainer") or data.get("container") or data
        )
        for key in ("Server", "server", "Servers", "servers", "Items", "items"):
            raw.extend(_flatten_servers(container.get(key)))
        if not raw:
            raw = _flatten_servers(container)
    else:
        raw = [dict(element.attrib) for element in _elements(_parse_xml(trimmed), "Server")]

    return [entry for entry in (_server_entry(item) for item in raw) if entry]


def find_server_entry(
    servers: list[PlexServerEntry], server_identifier: str
) -> PlexServerEntry | None:
    wanted = normalize_id(server_identifier)
    if not wanted:
        return None
    for server in servers:
        if any(normalize_id(value) == wanted for value in server.identifiers()):
            return server
    return None


# =============================================================================
# LIBRARY SECTIONS
# =============================================================================


class SectionKey(BaseModel):
    raw: str = ""
    sanitized: str = ""
    numeric: str = ""


def section_key_parts(value: Any) -> SectionKey:
    """Split ``/library/sections/3?x=y`` into raw, path and trailing number."""
    raw = "" if value is None else str(value).strip()
    if not raw:
        return SectionKey()
    sanitized = re.split(r"[?#]", raw, maxsplit=1)[0].rstrip("/") or raw
    match = _SECTION_NUMBER.search(sanitized)
    return SectionKey(raw=raw, sanitized=sanitized, numeric=match.group(1) if match else "")


class SectionCatalog(BaseModel):
    """Canonical section ids of a server plus every alias that maps to one."""

    section_ids: list[str] = Field(default_factory=list)
    key_to_id: dict[str, str] = Field(default_factory=dict)

    def available_ids(self) -> list[str]:
        if self.section_ids:
            return self.section_ids
        return list(dict.fromkeys(self.key_to_id.values()))

    def resolve(self, value: Any) -> str | None:
        """Canonical id for a configured section id, key or path."""
        available = set(self.available_ids())
        parts = section_key_parts(value)
        for candidate in (parts.raw, parts.sanitized, parts.numeric):
            if not candidate:
                continue
            if candidate in available:
                return candidate
            mapped = self.key_to_id.get(candidate)
            if not mapped:
                continue
            if mapped in available:
                return mapped
            mapped_parts = section_key_parts(mapped)
            if mapped_parts.numeric and mapped_parts.numeric in available:
                return mapped_parts.numeric
            return mapped
        return None


def parse_server_sections(payload: str) -> SectionCatalog:
    """Sections from plex.tv ``/api/servers/{machineIdentifier}``."""
    section_ids: list[str] = []
    key_to_id: dict[str, str] = {}

    def add_id(value: Any) -> str | None:
        normalized = "" if value is None else str(value).strip()
        if not normalized:
            return None
        if normalized not in section_ids:
            section_ids.append(normalized)
        return normalized

    def map_key(key: Any, section_id: str) -> None:
        parts = section_key_parts(key)
        if not parts.raw:
            return
        key_to_id[parts.raw] = section_id
        key_to_id[parts.sanitized] = section_id
        if parts.numeric:
            key_to_id[parts.numeric] = section_id

    def push(section: Any) -> None:
        if isinstance(section, dict):
            section_id = add_id(section.get("id", section.get("ID")))
            key = section.get("key", section.get("Key"))
            if section_id:
                map_key(key, section_id)
            elif key is not None:
                fallback = add_id(section_key_parts(key).numeric)
                if fallback:
                    map_key(key, fallback)
        elif section is not None:
            fallback = add_id(section)
            if fallback:
                map_key(section, fallback)

    trimmed = (payload or "").strip()
    data = _parse_json(trimmed) if trimmed else None
    if isinstance(data, dict):
        container = data.get("MediaContainer") or data.get("mediaContainer") or data
        servers = as_list(
            container.get("Server")
            or container.get("server")
            or container.get("Servers")
            or container.get("servers")
        )
        for server in servers:
            if not isinstance(server, dict):
                continue
            sections = (
                server.get("Section")
                or server.get("section")
                or server.get("Sections")
                or server.get("sections")
                or server.get("Directory")
                or server.get("Metadata")
            )
            for section in as_list(sections):
                push(section)
    elif trimmed:
        for element in _elements(_parse_xml(trimmed), "Section"):
            attributes = {key.lower(): value for key, value in element.attrib.items()}
            push({"id": attributes.get("id"), "key": attributes.get("key")})

    for section_id in section_ids:
        key_to_id[section_id] = section_id
    return SectionCatalog(section_ids=section_ids, key_to_id=key_to_id)


def _library_from_mapping(entry: dict[str, Any]) -> SharedLibrary | None:
    if entry.get("id") is not None:
        library_id = str(entry["id"])
    elif entry.get("sectionID") is not None:
        library_id = str(entry["sectionID"])
    elif entry.get("key"):
        library_id = _LEADING_NON_DIGITS.sub("", str(entry["key"])) or None
    else:
        library_id = None
    title = (
        entry.get("title")
        or entry.get("name")
        or entry.get("librarySectionTitle")
        or entry.get("sectionTitle")
    )
    if not library_id and not title:
        return None
    return SharedLibrary(id=library_id, title=title)


def normalize_libraries(entries: list[Any]) -> list[SharedLibrary]:
    """Libraries with an id, de-duplicated, titled by id when untitled."""
    seen: set[str] = set()
    libraries: list[SharedLibrary] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        library = _library_from_mapping(entry)
        library_id = (library.id or "").strip() if library else ""
        if not library_id or library_id in seen:
            continue
        seen.add(library_id)
        libraries.append(
            SharedLibrary(id=library_id, title=(library.title or "").strip() or library_id)
        )
    return libraries


def parse_library_sections(payload: str) -> list[SharedLibrary]:
    """Libraries from the media server's ``/library/sections``."""
    trimmed = (payload or "").strip()
    if not trimmed:
        return []

    data = _parse_json(trimmed)
    if isinstance(data, dict):
        container = data.get("MediaContainer") or data.get("mediaContainer") or data
        directories = (
            container.get("Directory")
            or container.get("directory")
            or container.get("Metadata")
            or container.get("metadata")
        )
        libraries = normalize_libraries(as_list(directories))
        if libraries:
            return libraries

    return normalize_libraries(
        [dict(element.attrib) for element in _elements(_parse_xml(trimmed), "Directory")]
    )


# =============================================================================
# USERS
# =============================================================================


def get_case_insensitive(source: Any, key: str) -> Any:
    if not isinstance(source, dict):
        return None
    target = key.lower()
    for entry_key, value in source.items():
        if str(entry_key).lower() == target:
            return value
    attributes = source.get("attributes") or source.get("$")
    if isinstance(attributes, dict):
        return get_case_insensitive(attributes, key)
    return None


def _normalize(value: Any) -> str:
    return "" if value is None else str(value).strip().lower()


def extract_user_id(candidate: Any) -> str | None:
    for key in HOME_USER_ID_KEYS:
        value = get_case_insensitive(candidate, key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def matches_email(user: Any, email: str) -> bool:
    wanted = _normalize(email)
    if not wanted or not isinstance(user, dict):
        return False
    account = user.get("account") if isinstance(user.get("account"), dict) else {}
    candidates = (user.get("email"), user.get("username"), user.get("title"), account.get("email"))
    return any(_normalize(candidate) == wanted for candidate in candidates)


def matches_account_id(user: Any, account_id: str) -> bool:
    wanted = _normalize(account_id)
    if not wanted or not isinstance(user, dict):
        return False
    account = user.get("account") if isinstance(user.get("account"), dict) else {}
    candidates = (
        user.get("id"),
        user.get("uuid"),
        user.get("userID"),
        user.get("machineIdentifier"),
        account.get("id"),
    )
    return any(_normalize(candidate) == wanted for candidate in candidates)


def _collect_user_like(node: Any, found: list[dict[str, Any]]) -> None:
    if isinstance(node, list):
        for entry in node:
            _collect_user_like(entry, found)
        return
    if not isinstance(node, dict):
        return
    keys = [str(key).lower() for key in node]
    if any("user" in key or "account" in key or "email" in key for key in keys):
        found.append(node)
    for value in node.values():
        if isinstance(value, (dict, list)):
            _collect_user_like(value, found)


def parse_invited_id(payload: str, email: str) -> str | None:
    """Find the invitee's Plex id in a ``/api/home/users`` answer."""
    trimmed = (payload or "").strip()
    if not trimmed:
        return None
    wanted = _normalize(email)

    candidates: list[dict[str, Any]] = []
    data = _parse_json(trimmed)
    if data is not None:
        _collect_user_like(data, candidates)

    for candidate in candidates:
        related = [candidate]
        for key in ("account", "user"):
            nested = get_case_insensitive(candidate, key)
            if isinstance(nested, dict):
                related.append(nested)
        invited_email = get_case_insensitive(candidate, "invitedEmail")
        if not any(matches_email(entry, email) for entry in related) and (
            not invited_email or _normalize(invited_email) != wanted
        ):
            continue
        for entry in related:
            user_id = extract_user_id(entry)
            if user_id:
                return user_id

    for pattern in _INVITED_ID_PATTERNS:
        match = pattern.search(trimmed)
        if match and match.group(1).strip():
            return match.group(1).strip()

    root = _parse_xml(trimmed) if data is None else None
    for element in [*_elements(root, "User"), *_elements(root, "HomeUser")]:
        attributes = {key.lower(): value for key, value in element.attrib.items()}
        if not any(
            _normalize(attributes.get(key)) == wanted for key in HOME_USER_EMAIL_KEYS
        ):
            continue
        user_id = extract_user_id(attributes)
        if user_id:
            return user_id
    return None


def users_from_payload(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get("users", data)
    if isinstance(data, dict):
        container = data.get("MediaContainer") or {}
        data = container.get("User") or container.get("Account") or []
    return [user for user in as_list(data) if isinstance(user, dict)]


# =============================================================================
# INVITES
# =============================================================================


def _invite_container(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    invitation = data.get("invitation")
    return invitation if isinstance(invitation, dict) else data


def _iso_timestamp(value: Any) -> str | None:
    if not value:
        return None
    if isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=UTC)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def map_invite_response(data: Any) -> MediaInvite:
    """Normalize a shared-server creation answer."""
    container = _invite_container(data)
    metadata = container.get("Metadata") if isinstance(container.get("Metadata"), dict) else {}

    invite_id = (
        container.get("id")
        or container.get("uuid")
        or container.get("inviteId")
        or container.get("identifier")
        or metadata.get("id")
    )
    links = container.get("links") if isinstance(container.get("links"), dict) else {}
    invite_url = (
        container.get("inviteUrl")
        or container.get("shareUrl")
        or container.get("uri")
        or container.get("url")
        or container.get("invite_uri")
        or links.get("invite")
    )
    status = container.get("status") or container.get("state")

    library_entries: list[Any] = []
    for entry in as_list(
        container.get("libraries")
        or container.get("sharedLibraries")
        or container.get("librarySections")
        or metadata.get("Metadata")
    ):
        library_entries.extend(entry if isinstance(entry, list) else [entry])

    return MediaInvite(
        invite_id=None if invite_id is None else str(invite_id),
        invite_url=str(invite_url) if invite_url else None,
        shared_libraries=[
            library
            for library in (
                _library_from_mapping(entry)
                for entry in library_entries
                if isinstance(entry, dict)
            )
            if library
        ],
        status=str(status) if status else None,
        invited_at=_iso_timestamp(
            container.get("created_at")
            or container.get("createdAt")
            or container.get("addedAt")
            or container.get("last_modified")
        ),
    )
