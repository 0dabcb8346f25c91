"""Invite domain service."""

from uuid import uuid4

import logfire

from donorlink.domain.model.common import utc_now
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.invite import Invite
from donorlink.domain.model.settings import PortalSettings
from donorlink.domain.repository import InviteRepository
from donorlink.domain.value import (
    ConnectionReport,
    DonorId,
    InviteId,
    PortalInvite,
    PortalInviteRequest,
    normalize_email,
)

from .base import Service


class PortalClient:
    """Invite-portal interface."""

    async def create_invite(
        self, settings: PortalSettings, request: PortalInviteRequest
    ) -> PortalInvite:
        """Create an invite on the portal.

        Args:
            settings: Portal connection settings
            request: Invite fields

        Returns:
            Normalized invite code and URL

        Raises:
            PortalUnreachable, PortalUnauthorized,
            PortalServerSelectionRequired, PortalRequestFailed
        """
        raise NotImplementedError

    async def revoke_invite(self, settings: PortalSettings, code: str) -> None:
        """Delete an invite on the portal. A missing invite counts as revoked."""
        raise NotImplementedError

    async def verify_connection(self, settings: PortalSettings) -> ConnectionReport:
        raise NotImplementedError


class InviteService(Service):
    """Domain service for portal invites owned by donors."""

    def __init__(
        self, invite_repository: InviteRepository, portal_client: PortalClient
    ) -> None:
        """Initialize invite service.

        Args:
            invite_repository: Invite repository
            portal_client: Invite-portal client
        """
        self.invite_repository = invite_repository
        self.portal_client = portal_client

    async def get_latest_active(self, donor_id: DonorId) -> Invite | None:
        with logfire.span("invite_service.get_latest_active", donor_id=str(donor_id)):
            return await self.invite_repository.find_latest_active_for_donor(donor_id)

    async def list_for_donor(self, donor_id: DonorId) -> list[Invite]:
        with logfire.span("invite_service.list_for_donor", donor_id=str(donor_id)):
            return await self.invite_repository.find_by_donor(donor_id)

    async def find_reusable(self, donor_id: DonorId, email: str) -> Invite | None:
        """Find the donor's active invite addressed to ``email``.

        Emails are compared case-insensitively.

        Args:
            donor_id: Owning donor
            email: Requested recipient

        Returns:
            The reusable invite, or None
        """
        with logfire.span("invite_service.find_reusable", donor_id=str(donor_id)):
            invite = await self.invite_repository.find_latest_active_for_donor(donor_id)
            if (
                invite
                and invite.is_active
                and invite.url
                and invite.recipient_email
                and normalize_email(invite.recipient_email) == normalize_email(email)
            ):
                logfire.info(
                    "Reusable invite found",
                    donor_id=str(donor_id),
                    invite_id=str(invite.id),
                )
                return invite
            return None

    async def list_active(self, donor_id: DonorId) -> list[Invite]:
        with logfire.span("invite_service.list_active", donor_id=str(donor_id)):
            return await self.invite_repository.find_active_by_donor(donor_id)

    async def create_portal_invite(
        self,
        settings: PortalSettings,
        email: str,
        note: str | None = None,
        expires_in_days: float | None = None,
    ) -> PortalInvite:
        """Ask the portal for a new invite addressed to ``email``."""
        with logfire.span(
            "invite_service.create_portal_invite", expires_in_days=expires_in_days
        ):
            request = PortalInviteRequest(
                email=email, note=note, expires_in_days=expires_in_days
            )
            created = await self.portal_client.create_invite(settings, request)
            logfire.info("Portal invite created", code=created.invite_code)
            return created

    async def revoke_portal_invite(self, settings: PortalSettings, code: str) -> None:
        with logfire.span("invite_service.revoke_portal_invite", code=code):
            await self.portal_client.revoke_invite(settings, code)
            logfire.info("Portal invite revoked", code=code)

    async def record_invite(
        self,
        donor: Donor,
        created: PortalInvite,
        recipient_email: str,
        note: str | None = None,
    ) -> Invite:
        """Store a portal invite as the donor's active invite.

        Args:
            donor: Owning donor
            created: Portal creation result
            recipient_email: Recipient (stored lowercase)
            note: Note sent to the portal

        Returns:
            Saved invite
        """
        with logfire.span("invite_service.record_invite", donor_id=str(donor.id)):
            invite = Invite(
                id=InviteId(uuid4()),
                donor_id=donor.id,
                code=created.invite_code,
                url=created.invite_url,
                recipient_email=normalize_email(recipient_email),
                note=note,
                created_at=utc_now(),
            )
            saved = await self.invite_repository.save(invite)
            logfire.info(
                "Invite recorded",
                donor_id=str(donor.id),
                invite_id=str(saved.id),
                code=saved.code,
            )
            return saved

    async def mark_revoked(self, invite: Invite) -> Invite:
        """Stamp ``revoked_at``. An already revoked invite is returned unchanged."""
        with logfire.span("invite_service.mark_revoked", invite_id=str(invite.id)):
            if not invite.is_active:
                logfire.info("Invite already revoked", invite_id=str(invite.id))
                return invite
            revoked = await self.invite_repository.save(
                invite.model_copy(update={"revoked_at": utc_now()})
            )
            logfire.info("Invite revoked", invite_id=str(invite.id))
            return revoked

    async def verify_connection(self, settings: PortalSettings) -> ConnectionReport:
        with logfire.span("invite_service.verify_connection"):
            return await self.portal_client.verify_connection(settings)
