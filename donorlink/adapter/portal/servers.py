"""Server-selection guidance returned by the invite portal.

When the portal cannot decide which back-end server an invite belongs to it
answers 400/422 with the servers it knows about. ``classify_servers`` turns
that answer into one of three outcomes the client acts on.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from donorlink.adapter.portal.body import (
    collect_server_values,
    normalize_server_id,
    sanitize_string,
    stringify_server_id,
)
from donorlink.domain.value import PortalServer

IDENTIFIER_KEYS = (
    "identifier",
    "server",
    "serverSlug",
    "server_slug",
    "serverKey",
    "server_key",
    "value",
    "key",
    "machine_identifier",
    "machineIdentifier",
)


def _first_present(source: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if source.get(key) is not None:
            return source[key]
    return None


def extract_available_servers(details: Any) -> list[PortalServer]:
    """Servers listed in a portal error body, in the portal's order."""
    if not isinstance(details, dict):
        return []

    raw = (
        details.get("available_servers")
        or details.get("availableServers")
        or details.get("servers")
        or []
    )
    if not isinstance(raw, list):
        return []

    servers: list[PortalServer] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        server_id = normalize_server_id(
            _first_present(entry, "id", "server_id", "serverId", "serverID")
        )
        identifiers = collect_server_values(
            [entry.get(key) for key in IDENTIFIER_KEYS] + [server_id]
        )
        identifier = identifiers[0] if identifiers else None
        if identifier is None and server_id is None:
            continue
        servers.append(
            PortalServer(
                id=server_id,
                identifier=identifier or stringify_server_id(server_id),
                name=str(
                    entry.get("name")
                    or entry.get("friendly_name")
                    or entry.get("friendlyName")
                    or ""
                ),
                type=str(
                    entry.get("server_type")
                    or entry.get("serverType")
                    or entry.get("type")
                    or ""
                ),
            )
        )
    return servers


def format_server_options(servers: list[PortalServer]) -> str:
    return ", ".join(label for label in (server.label() for server in servers) if label)


def server_selection(server: PortalServer) -> str | None:
    """Value to send as ``server`` when retrying with this server."""
    return sanitize_string(server.identifier) or stringify_server_id(server.id)


class NoServers(BaseModel):
    kind: Literal["none"] = "none"


class SingleServer(BaseModel):
    kind: Literal["single"] = "single"
    server: PortalServer


class AmbiguousServers(BaseModel):
    kind: Literal["ambiguous"] = "ambiguous"
    servers: list[PortalServer]


ServerOffer = Annotated[
    NoServers | SingleServer | AmbiguousServers, Field(discriminator="kind")
]


def classify_servers(details: Any) -> ServerOffer:
    """Classify the servers a portal error body offers."""
    servers = extract_available_servers(details)
    if not servers:
        return NoServers()
    if len(servers) == 1:
        return SingleServer(server=servers[0])
    return AmbiguousServers(servers=servers)
