"""Process-wide Plex discovery cache."""

import logfire
from pydantic import BaseModel

from donorlink.domain.service.settings_service import SettingsListener


class ServerDescriptor(BaseModel):
    """The owned server a token resolved to."""

    machine_identifier: str
    legacy_numeric_id: str | None = None
    name: str = "unknown"
    client_identifier: str | None = None


class MediaServerCache(SettingsListener):
    """Discovered user-list paths and server descriptors.

    Entries are keyed by the configuration they were derived from and are
    overwritten idempotently, so concurrent requests may race safely. Saving
    the ``mediaServer`` settings group clears everything.
    """

    GROUP = "mediaServer"

    def __init__(self) -> None:
        self.user_list_paths: dict[str, str] = {}
        self.server_descriptors: dict[str, ServerDescriptor] = {}

    @staticmethod
    def descriptor_key(token: str, server_identifier: str) -> str | None:
        token = (token or "").strip()
        server_identifier = (server_identifier or "").strip()
        if not token or not server_identifier:
            return None
        return f"{token}:{server_identifier}"

    def get_descriptor(self, token: str, server_identifier: str) -> ServerDescriptor | None:
        key = self.descriptor_key(token, server_identifier)
        return self.server_descriptors.get(key) if key else None

    def set_descriptor(
        self, token: str, server_identifier: str, descriptor: ServerDescriptor
    ) -> None:
        key = self.descriptor_key(token, server_identifier)
        if key:
            self.server_descriptors[key] = descriptor

    def get_user_list_path(self, base_url: str) -> str | None:
        return self.user_list_paths.get(base_url)

    def set_user_list_path(self, base_url: str, path: str) -> None:
        self.user_list_paths[base_url] = path

    def forget_user_list_path(self, base_url: str) -> None:
        self.user_list_paths.pop(base_url, None)

    def reset(self) -> None:
        self.user_list_paths.clear()
        self.server_descriptors.clear()

    def settings_changed(self, group: str) -> None:
        if group == self.GROUP:
            self.reset()
            logfire.info("Media server cache reset")
