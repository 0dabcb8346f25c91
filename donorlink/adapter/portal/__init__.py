"""Invite-portal adapter."""

from .body import (
    INVITE_CREATION_ENDPOINTS,
    INVITE_ENDPOINT_BASES,
    build_invitation_body,
    generate_invite_code,
)
from .client import HttpPortalClient
from .servers import (
    AmbiguousServers,
    NoServers,
    SingleServer,
    classify_servers,
    extract_available_servers,
    format_server_options,
)

__all__ = [
    "AmbiguousServers",
    "HttpPortalClient",
    "INVITE_CREATION_ENDPOINTS",
    "INVITE_ENDPOINT_BASES",
    "NoServers",
    "SingleServer",
    "build_invitation_body",
    "classify_servers",
    "extract_available_servers",
    "format_server_options",
    "generate_invite_code",
]
