"""Admin subscriber use cases."""

from uuid import UUID

import logfire
from pydantic import BaseModel

from donorlink.adapter.error import AdapterError
from donorlink.application.usecase.admin.views import (
    InviteView,
    PaymentView,
    ShareLinkSummary,
    SubscriberView,
)
from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.application.usecase.lifecycle import AccessController, RevocationReport
from donorlink.domain.error import NotFoundError, ServiceDisabledError, ValidationError
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.invite import Invite
from donorlink.domain.service import (
    DonorService,
    EventService,
    InviteService,
    NotificationService,
    PaymentService,
    SettingsService,
    ShareLinkService,
)
from donorlink.domain.value import DonorId, DonorStatus, is_valid_email, normalize_email


def parse_donor_id(value: str) -> DonorId:
    try:
        return DonorId(UUID(value))
    except ValueError as e:
        raise NotFoundError("Donor", value) from e


class ListSubscribersResponse(ApiModel):
    subscribers: list[SubscriberView]


class ListSubscribersUseCase(BaseUseCase):
    """Donors with their invites, payments and share link."""

    def __init__(
        self,
        donor_service: DonorService,
        invite_service: InviteService,
        payment_service: PaymentService,
        share_link_service: ShareLinkService,
        settings_service: SettingsService,
    ) -> None:
        self.donor_service = donor_service
        self.invite_service = invite_service
        self.payment_service = payment_service
        self.share_link_service = share_link_service
        self.settings_service = settings_service

    async def execute(self, request: None = None) -> ListSubscribersResponse:
        with logfire.span("list_subscribers.execute"):
            app = await self.settings_service.app()
            subscribers = []
            for donor in await self.donor_service.list_donors():
                invites = await self.invite_service.list_for_donor(donor.id)
                payments = await self.payment_service.list_for_donor(donor.id)
                link = await self.share_link_service.find_by_donor(donor.id)
                subscribers.append(
                    SubscriberView.of(
                        donor,
                        invites=[InviteView.of(invite) for invite in invites],
                        payments=[PaymentView.of(payment) for payment in payments],
                        share_link=(
                            ShareLinkSummary.of(link, app.public_base_url)
                            if link
                            else None
                        ),
                    )
                )
            return ListSubscribersResponse(subscribers=subscribers)


# =============================================================================
# Invites
# =============================================================================


class IssueSubscriberInviteRequest(ApiModel):
    donor_id: str = ""
    email: str | None = None
    note: str | None = None


class SubscriberInviteResponse(ApiModel):
    invite: InviteView
    email_sent: bool
    email_error: str | None = None


async def _send_invite_email(
    settings_service: SettingsService,
    notification_service: NotificationService,
    event_service: EventService,
    donor: Donor,
    invite: Invite,
) -> str | None:
    """Email an invite. Returns the failure message, if any."""
    smtp = await settings_service.smtp()
    try:
        await notification_service.send_invite_email(smtp, donor, invite)
    except (AdapterError, ServiceDisabledError) as e:
        logfire.warn("Invite email not sent", invite_id=str(invite.id), error=str(e))
        return str(e)
    await event_service.log(
        "invite.email.sent",
        {"donorId": str(donor.id), "inviteId": str(invite.id)},
    )
    return None


class IssueSubscriberInviteUseCase(BaseUseCase):
    """Admin-initiated invite, emailed to its recipient."""

    def __init__(
        self,
        donor_service: DonorService,
        settings_service: SettingsService,
        notification_service: NotificationService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> None:
        self.donor_service = donor_service
        self.settings_service = settings_service
        self.notification_service = notification_service
        self.event_service = event_service
        self.access_controller = access_controller

    async def execute(
        self, request: IssueSubscriberInviteRequest
    ) -> SubscriberInviteResponse:
        """Create a fresh invite, superseding any active one, then email it.

        Raises:
            NotFoundError: If the donor does not exist
            ValidationError: If the recipient email is invalid
        """
        with logfire.span("issue_subscriber_invite.execute", donor_id=request.donor_id):
            donor = await self.donor_service.get_donor(parse_donor_id(request.donor_id))
            recipient = normalize_email(request.email) or donor.email
            if not is_valid_email(recipient):
                raise ValidationError("Please provide a valid email address")

            note = (request.note or "").strip() or f"Issued by admin for {donor.email}"
            invite = await self.access_controller.issue_invite(
                donor, recipient, note=note, source="admin"
            )
            email_error = await _send_invite_email(
                self.settings_service,
                self.notification_service,
                self.event_service,
                donor,
                invite,
            )
            return SubscriberInviteResponse(
                invite=InviteView.of(invite),
                email_sent=email_error is None,
                email_error=email_error,
            )


class SubscriberRequest(BaseModel):
    donor_id: str


class ResendInviteEmailUseCase(BaseUseCase):
    def __init__(
        self,
        donor_service: DonorService,
        invite_service: InviteService,
        settings_service: SettingsService,
        notification_service: NotificationService,
        event_service: EventService,
    ) -> None:
        self.donor_service = donor_service
        self.invite_service = invite_service
        self.settings_service = settings_service
        self.notification_service = notification_service
        self.event_service = event_service

    async def execute(self, request: SubscriberRequest) -> SubscriberInviteResponse:
        """Email the donor's active invite again.

        Raises:
            NotFoundError: If the donor has no active invite
            ServiceDisabledError: If SMTP is not configured
        """
        with logfire.span("resend_invite_email.execute", donor_id=request.donor_id):
            donor = await self.donor_service.get_donor(parse_donor_id(request.donor_id))
            invite = await self.invite_service.get_latest_active(donor.id)
            if invite is None:
                raise NotFoundError(
                    "Invite", str(donor.id), "No active invite for this subscriber"
                )
            smtp = await self.settings_service.smtp()
            await self.notification_service.send_invite_email(smtp, donor, invite)
            await self.event_service.log(
                "invite.email.sent",
                {"donorId": str(donor.id), "inviteId": str(invite.id), "resend": True},
            )
            return SubscriberInviteResponse(invite=InviteView.of(invite), email_sent=True)


# =============================================================================
# Share links and revocation
# =============================================================================


class IssueSubscriberShareLinkUseCase(BaseUseCase):
    """Mint the donor's share link, or rotate the tokens of the existing one."""

    def __init__(
        self,
        donor_service: DonorService,
        share_link_service: ShareLinkService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> None:
        self.donor_service = donor_service
        self.share_link_service = share_link_service
        self.settings_service = settings_service
        self.event_service = event_service

    async def execute(self, request: SubscriberRequest) -> ShareLinkSummary:
        with logfire.span("issue_subscriber_share_link.execute", donor_id=request.donor_id):
            donor = await self.donor_service.get_donor(parse_donor_id(request.donor_id))
            link = await self.share_link_service.issue_for_donor(donor.id)
            await self.event_service.log(
                "share_link.generated",
                {"donorId": str(donor.id), "shareLinkId": str(link.id)},
            )
            app = await self.settings_service.app()
            return ShareLinkSummary.of(link, app.public_base_url)


class RevokeSubscriberResponse(ApiModel):
    subscriber: SubscriberView
    revocation: RevocationReport


class RevokeSubscriberUseCase(BaseUseCase):
    """Force-revoke a donor's access; the donor ends up ``cancelled``."""

    def __init__(
        self,
        donor_service: DonorService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> None:
        self.donor_service = donor_service
        self.event_service = event_service
        self.access_controller = access_controller

    async def execute(self, request: SubscriberRequest) -> RevokeSubscriberResponse:
        with logfire.span("revoke_subscriber.execute", donor_id=request.donor_id):
            donor = await self.donor_service.get_donor(parse_donor_id(request.donor_id))
            donor = await self.donor_service.update_status(donor, DonorStatus.CANCELLED)
            report = await self.access_controller.revoke_access(donor, "admin.revoke")
            await self.event_service.log(
                "donor.access.revoked",
                {
                    "donorId": str(donor.id),
                    "source": "admin",
                    "invites": report.revoked_invite_ids,
                },
            )
            return RevokeSubscriberResponse(
                subscriber=SubscriberView.of(donor), revocation=report
            )
