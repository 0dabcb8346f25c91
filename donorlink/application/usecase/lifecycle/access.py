"""Invite issuance and access revocation.

Shared by the payment webhook, the share-link endpoints and the admin
surface, so that every path grants and removes media-server access the
same way.
"""

from typing import Any

import logfire
from pydantic import BaseModel, Field

from donorlink.adapter.error import AdapterError, PortalServerSelectionRequired
from donorlink.application.usecase.base import ApiModel
from donorlink.domain.error import ServiceDisabledError
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.invite import Invite
from donorlink.domain.model.settings import PortalSettings
from donorlink.domain.service import (
    EventService,
    InviteService,
    MediaServerService,
    NotificationService,
    SettingsService,
)
from donorlink.domain.value import normalize_email

# Failures of these kinds never abort a revocation
BEST_EFFORT_ERRORS = (AdapterError, ServiceDisabledError)


class InviteOutcome(BaseModel):
    """An active invite and whether it was reused rather than created."""

    invite: Invite
    reused: bool = False


class RevocationReport(ApiModel):
    """What a revocation touched."""

    revoked_invite_ids: list[str] = Field(default_factory=list)
    portal_failures: list[str] = Field(default_factory=list)
    media_server: dict[str, Any] | None = None
    cancellation_email_sent: bool = False


def _server_payload(error: PortalServerSelectionRequired) -> list[dict[str, Any]]:
    return [
        server.model_dump() if isinstance(server, BaseModel) else server
        for server in error.servers
    ]


class AccessController:
    """Grants and removes a donor's access."""

    def __init__(
        self,
        settings_service: SettingsService,
        invite_service: InviteService,
        media_server_service: MediaServerService,
        notification_service: NotificationService,
        event_service: EventService,
    ) -> None:
        """Initialize access controller.

        Args:
            settings_service: Runtime settings store
            invite_service: Invite domain service
            media_server_service: Media-server domain service
            notification_service: Donor email service
            event_service: Audit log
        """
        self.settings_service = settings_service
        self.invite_service = invite_service
        self.media_server_service = media_server_service
        self.notification_service = notification_service
        self.event_service = event_service

    async def ensure_invite(
        self,
        donor: Donor,
        email: str | None = None,
        note: str | None = None,
        expires_in_days: float | None = None,
        source: str = "subscription",
    ) -> InviteOutcome:
        """Return the donor's reusable invite, or issue a new one.

        The reuse check runs immediately before the portal call. An active
        invite addressed to the same recipient (ignoring case) is returned
        without contacting the portal.

        Args:
            donor: Donor receiving access
            email: Recipient; defaults to the donor's email
            note: Note stored on the portal invite
            expires_in_days: Invite lifetime override
            source: Audit label of the calling flow

        Returns:
            The active invite and whether it was reused

        Raises:
            PortalServerSelectionRequired: After logging an admin event
            AdapterError: On any other portal failure
        """
        recipient = normalize_email(email) or donor.email
        with logfire.span(
            "access_controller.ensure_invite", donor_id=str(donor.id), source=source
        ):
            existing = await self.invite_service.find_reusable(donor.id, recipient)
            if existing:
                return InviteOutcome(invite=existing, reused=True)
            invite = await self.issue_invite(
                donor, recipient, note=note, expires_in_days=expires_in_days, source=source
            )
            return InviteOutcome(invite=invite, reused=False)

    async def issue_invite(
        self,
        donor: Donor,
        recipient: str,
        note: str | None = None,
        expires_in_days: float | None = None,
        source: str = "admin",
    ) -> Invite:
        """Create a portal invite and make it the donor's only active invite."""
        with logfire.span(
            "access_controller.issue_invite", donor_id=str(donor.id), source=source
        ):
            portal = await self.settings_service.portal()
            try:
                created = await self.invite_service.create_portal_invite(
                    portal, recipient, note=note, expires_in_days=expires_in_days
                )
            except PortalServerSelectionRequired as e:
                await self.event_service.log(
                    "invite.server_selection_required",
                    {
                        "donorId": str(donor.id),
                        "source": source,
                        "message": e.message,
                        "servers": _server_payload(e),
                    },
                )
                raise

            superseded = await self._revoke_active_invites(donor, portal)
            invite = await self.invite_service.record_invite(
                donor, created, recipient, note
            )
            await self.event_service.log(
                "invite.created",
                {
                    "donorId": str(donor.id),
                    "inviteId": str(invite.id),
                    "code": invite.code,
                    "source": source,
                    "superseded": superseded,
                },
            )
            return invite

    async def _revoke_active_invites(
        self,
        donor: Donor,
        portal: PortalSettings,
        failures: list[str] | None = None,
    ) -> list[str]:
        revoked: list[str] = []
        for invite in await self.invite_service.list_active(donor.id):
            try:
                await self.invite_service.revoke_portal_invite(portal, invite.code)
            except BEST_EFFORT_ERRORS as e:
                logfire.warn(
                    "Portal invite revocation failed",
                    invite_id=str(invite.id),
                    error=str(e),
                )
                if failures is not None:
                    failures.append(invite.code)
            await self.invite_service.mark_revoked(invite)
            await self.event_service.log(
                "invite.revoked",
                {"donorId": str(donor.id), "inviteId": str(invite.id), "code": invite.code},
            )
            revoked.append(str(invite.id))
        return revoked

    async def revoke_access(
        self,
        donor: Donor,
        reason: str,
        revoke_media_user: bool = True,
        notify: bool = True,
    ) -> RevocationReport:
        """Revoke every active invite and, optionally, the media-server user.

        Each step is best-effort: provider failures are logged and the
        remaining steps still run. Revoking twice is harmless.

        Args:
            donor: Donor losing access
            reason: Audit label, e.g. ``BILLING.SUBSCRIPTION.CANCELLED``
            revoke_media_user: Also remove the user from the media server
            notify: Send the cancellation email

        Returns:
            What was revoked
        """
        with logfire.span(
            "access_controller.revoke_access", donor_id=str(donor.id), reason=reason
        ):
            report = RevocationReport()
            portal = await self.settings_service.portal()
            report.revoked_invite_ids = await self._revoke_active_invites(
                donor, portal, report.portal_failures
            )

            if revoke_media_user and donor.email:
                media = await self.settings_service.media_server()
                try:
                    result = await self.media_server_service.revoke_user(
                        media, donor.email
                    )
                    report.media_server = result.model_dump()
                    if result.success:
                        await self.event_service.log(
                            "mediaserver.user.revoked",
                            {"donorId": str(donor.id), "reason": reason},
                        )
                except BEST_EFFORT_ERRORS as e:
                    logfire.warn(
                        "Media server revocation failed",
                        donor_id=str(donor.id),
                        error=str(e),
                    )
                    report.media_server = {"success": False, "reason": str(e)}

            if notify and donor.email:
                smtp = await self.settings_service.smtp()
                try:
                    await self.notification_service.send_cancellation_email(smtp, donor)
                    report.cancellation_email_sent = True
                except BEST_EFFORT_ERRORS as e:
                    logfire.warn(
                        "Cancellation email not sent",
                        donor_id=str(donor.id),
                        error=str(e),
                    )

            logfire.info(
                "Donor access revoked",
                donor_id=str(donor.id),
                invites=len(report.revoked_invite_ids),
            )
            return report
