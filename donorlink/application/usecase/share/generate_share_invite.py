"""Generate invite from share link use case."""

import logfire
from pydantic import Field

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.application.usecase.lifecycle import AccessController
from donorlink.application.usecase.share.projection import (
    ShareProjection,
    build_projection,
    resolve_share_link,
)
from donorlink.domain.error import SubscriptionInactiveError, ValidationError
from donorlink.domain.service import (
    DonorService,
    EventService,
    ProspectService,
    SettingsService,
    ShareLinkService,
)
from donorlink.domain.value import is_valid_email, normalize_email


class GenerateShareInviteRequest(ApiModel):
    token: str = ""
    email: str = ""
    name: str = ""
    note: str = ""
    expires_in_days: float | None = Field(default=None, gt=0)
    session_token: str | None = None


def default_note(name: str, email: str) -> str:
    parts = ["Generated from share link"]
    if name:
        parts.append(f"for {name}")
    if email:
        parts.append(f"<{email}>")
    return " ".join(parts)


class GenerateShareInviteUseCase(BaseUseCase):
    """Mint (or reuse) a portal invite on behalf of a share link's donor."""

    def __init__(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        settings_service: SettingsService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> None:
        """Initialize use case.

        Args:
            share_link_service: Share link domain service
            donor_service: Donor domain service
            prospect_service: Prospect domain service
            settings_service: Runtime settings store
            event_service: Audit log
            access_controller: Invite issuance
        """
        self.share_link_service = share_link_service
        self.donor_service = donor_service
        self.prospect_service = prospect_service
        self.settings_service = settings_service
        self.event_service = event_service
        self.access_controller = access_controller

    async def execute(self, request: GenerateShareInviteRequest) -> ShareProjection:
        """Return the projection with the donor's invite for ``request.email``.

        An active invite already addressed to the same email (ignoring case)
        is reused without calling the portal. Contact details still update.

        Raises:
            NotFoundError: If the link is unknown or no longer valid
            UnauthorizedError: If the session token does not match
            ValidationError: If the email is missing or invalid
            SubscriptionInactiveError: If the donor is not active
        """
        with logfire.span("generate_share_invite.execute"):
            resolved = await resolve_share_link(
                request.token,
                self.share_link_service,
                self.donor_service,
                self.prospect_service,
            )
            self.share_link_service.verify_session(resolved.link, request.session_token)

            email = request.email.strip()
            if not email:
                raise ValidationError("Email is required to generate an invite")
            if not is_valid_email(normalize_email(email)):
                raise ValidationError("Please provide a valid email address")

            donor = resolved.donor
            if donor is None:
                raise SubscriptionInactiveError("none")
            if not donor.is_active:
                logfire.warn(
                    "Share invite refused for inactive donor",
                    donor_id=str(donor.id),
                    status=donor.status.value,
                )
                raise SubscriptionInactiveError(donor.status.value)

            name = request.name.strip()
            note = request.note.strip() or default_note(name, email)
            donor = await self.donor_service.update_contact(donor, email=email, name=name)

            outcome = await self.access_controller.ensure_invite(
                donor,
                email=email,
                note=note,
                expires_in_days=request.expires_in_days,
                source="share_link",
            )
            link = await self.share_link_service.mark_used(resolved.link)
            await self.event_service.log(
                "invite.share.reused" if outcome.reused else "share.invite.generated",
                {
                    "donorId": str(donor.id),
                    "inviteId": str(outcome.invite.id),
                    "shareLinkId": str(link.id),
                },
            )
            logfire.info(
                "Share invite ready",
                donor_id=str(donor.id),
                invite_id=str(outcome.invite.id),
                reused=outcome.reused,
            )

            paypal = await self.settings_service.paypal()
            return build_projection(
                paypal, link=link, donor=donor, invite=outcome.invite
            )
