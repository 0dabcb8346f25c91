"""Plex media-server adapter."""

from .cache import MediaServerCache, ServerDescriptor
from .client import PlexClient
from .parsing import (
    ResourceAmbiguous,
    ResourceEmpty,
    ResourceMatch,
    SectionCatalog,
    parse_resources,
    parse_server_sections,
    resolve_owned_server,
)

__all__ = [
    "MediaServerCache",
    "PlexClient",
    "ResourceAmbiguous",
    "ResourceEmpty",
    "ResourceMatch",
    "SectionCatalog",
    "ServerDescriptor",
    "parse_resources",
    "parse_server_sections",
    "resolve_owned_server",
]
