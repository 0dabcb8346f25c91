"""Signed-in donor account use cases."""

import logfire
from pydantic import Field

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.application.usecase.customer.dashboard import (
    CustomerDashboard,
    build_dashboard,
    require_signed_in_donor,
)
from donorlink.application.usecase.lifecycle import AccessController
from donorlink.domain.error import SubscriptionInactiveError, ValidationError
from donorlink.domain.service import (
    DonorService,
    DonorSessionService,
    EventService,
    InviteService,
    SettingsService,
)
from donorlink.domain.value import is_valid_email, normalize_email


class UpdateCustomerProfileRequest(ApiModel):
    email: str = ""
    name: str = ""
    session_id: str | None = None


class GenerateCustomerInviteRequest(ApiModel):
    email: str | None = None
    name: str | None = None
    note: str = ""
    expires_in_days: float | None = Field(default=None, gt=0)
    session_id: str | None = None


def dashboard_note(name: str, email: str) -> str:
    parts = ["Generated from customer dashboard"]
    if name:
        parts.append(f"for {name}")
    if email:
        parts.append(f"<{email}>")
    return " ".join(parts)


class UpdateCustomerProfileUseCase(BaseUseCase):
    def __init__(
        self,
        donor_service: DonorService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> None:
        self.donor_service = donor_service
        self.donor_session_service = donor_session_service
        self.invite_service = invite_service
        self.settings_service = settings_service
        self.event_service = event_service

    async def execute(self, request: UpdateCustomerProfileRequest) -> CustomerDashboard:
        """Change the signed-in donor's email and name.

        Raises:
            UnauthorizedError: Without a live donor session
            ValidationError: If the email is missing or malformed
            ConflictError: If the email belongs to another donor
        """
        with logfire.span("update_customer_profile.execute"):
            donor = await require_signed_in_donor(
                self.donor_session_service, self.donor_service, request.session_id
            )
            email = normalize_email(request.email)
            if not email:
                raise ValidationError(
                    "A valid email is required to update your profile."
                )
            if not is_valid_email(email):
                raise ValidationError("Please provide a valid email address.")

            donor = await self.donor_service.update_contact(
                donor, email=email, name=request.name.strip()
            )
            await self.event_service.log(
                "customer.profile.updated",
                {
                    "donorId": str(donor.id),
                    "updates": {"email": donor.email, "name": donor.name},
                },
            )
            return await build_dashboard(
                self.settings_service, self.invite_service, donor
            )


class GenerateCustomerInviteUseCase(BaseUseCase):
    """Mint (or reuse) a portal invite for the signed-in donor."""

    def __init__(
        self,
        donor_service: DonorService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> None:
        self.donor_service = donor_service
        self.donor_session_service = donor_session_service
        self.invite_service = invite_service
        self.settings_service = settings_service
        self.event_service = event_service
        self.access_controller = access_controller

    async def execute(
        self, request: GenerateCustomerInviteRequest
    ) -> CustomerDashboard:
        """Return the dashboard with an invite for ``request.email``.

        The recipient defaults to the donor's own email. An active invite
        already addressed to it is reused without calling the portal.

        Raises:
            UnauthorizedError: Without a live donor session
            ValidationError: If the email is malformed
            SubscriptionInactiveError: If the donor is not active
        """
        with logfire.span("generate_customer_invite.execute"):
            donor = await require_signed_in_donor(
                self.donor_session_service, self.donor_service, request.session_id
            )
            email = normalize_email(request.email or donor.email)
            name = (
                request.name.strip()
                if request.name is not None
                else (donor.name or "").strip()
            )
            if not email:
                raise ValidationError("Email is required to generate an invite.")
            if not is_valid_email(email):
                raise ValidationError("Please provide a valid email address.")
            if not donor.is_active:
                raise SubscriptionInactiveError(donor.status.value)

            donor = await self.donor_service.update_contact(
                donor, email=email, name=name
            )
            outcome = await self.access_controller.ensure_invite(
                donor,
                email=email,
                note=request.note.strip() or dashboard_note(name, email),
                expires_in_days=request.expires_in_days,
                source="customer",
            )
            await self.event_service.log(
                "invite.customer.reused"
                if outcome.reused
                else "invite.customer.generated",
                {"donorId": str(donor.id), "inviteId": str(outcome.invite.id)},
            )
            logfire.info(
                "Customer invite ready",
                donor_id=str(donor.id),
                invite_id=str(outcome.invite.id),
                reused=outcome.reused,
            )
            return await build_dashboard(
                self.settings_service, self.invite_service, donor
            )
