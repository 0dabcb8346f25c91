"""Media-server domain service."""

from typing import Any

import logfire

from donorlink.domain.model.settings import MediaServerSettings
from donorlink.domain.value import AccessChangeResult, ConnectionReport, MediaInvite

from .base import Service


class MediaServerClient:
    """Media-server interface."""

    async def create_invite(
        self,
        settings: MediaServerSettings,
        email: str,
        friendly_name: str | None = None,
        library_section_ids: list[str] | None = None,
    ) -> MediaInvite:
        """Share the configured libraries with an existing account.

        Raises:
            RecipientNotFound: If the email has never signed in to the provider
        """
        raise NotImplementedError

    async def cancel_invite(
        self, settings: MediaServerSettings, invite_id: str
    ) -> AccessChangeResult:
        raise NotImplementedError

    async def list_users(self, settings: MediaServerSettings) -> list[dict[str, Any]]:
        raise NotImplementedError

    async def revoke_user(
        self,
        settings: MediaServerSettings,
        *,
        email: str | None = None,
        account_id: str | None = None,
    ) -> AccessChangeResult:
        raise NotImplementedError

    async def verify_connection(self, settings: MediaServerSettings) -> ConnectionReport:
        raise NotImplementedError


class MediaServerService(Service):
    """Domain service for media-server access."""

    def __init__(self, media_server_client: MediaServerClient) -> None:
        self.media_server_client = media_server_client

    async def revoke_user(
        self, settings: MediaServerSettings, email: str
    ) -> AccessChangeResult:
        """Remove a user's access to the media server.

        Args:
            settings: Media-server settings
            email: Email of the user to remove

        Returns:
            Outcome; ``skipped`` when the media server is not configured
        """
        with logfire.span("media_server_service.revoke_user"):
            if not settings.is_configured:
                logfire.info("Media server not configured, skipping revocation")
                return AccessChangeResult(
                    success=False, skipped=True, reason="Media server not configured"
                )
            result = await self.media_server_client.revoke_user(settings, email=email)
            logfire.info(
                "Media server revocation finished",
                success=result.success,
                reason=result.reason,
            )
            return result

    async def cancel_invite(
        self, settings: MediaServerSettings, invite_id: str
    ) -> AccessChangeResult:
        with logfire.span("media_server_service.cancel_invite", invite_id=invite_id):
            return await self.media_server_client.cancel_invite(settings, invite_id)

    async def list_users(self, settings: MediaServerSettings) -> list[dict[str, Any]]:
        with logfire.span("media_server_service.list_users"):
            users = await self.media_server_client.list_users(settings)
            logfire.info("Media server users listed", count=len(users))
            return users

    async def verify_connection(self, settings: MediaServerSettings) -> ConnectionReport:
        with logfire.span("media_server_service.verify_connection"):
            return await self.media_server_client.verify_connection(settings)
