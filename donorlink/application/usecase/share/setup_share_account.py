"""Set up an account from a share link use case."""

import logfire

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.application.usecase.share.projection import (
    INACTIVE_MESSAGE,
    ShareProjection,
    build_projection,
    resolve_share_link,
)
from donorlink.domain.error import ForbiddenError, ValidationError
from donorlink.domain.model.donor import Donor
from donorlink.domain.repository import TransactionManager
from donorlink.domain.service import (
    DonorService,
    EventService,
    InviteService,
    PasswordService,
    ProspectService,
    SettingsService,
    ShareLinkService,
    validate_new_password,
)
from donorlink.domain.value import DonorStatus, is_valid_email, normalize_email


class SetupShareAccountRequest(ApiModel):
    token: str = ""
    email: str | None = None
    name: str | None = None
    password: str = ""
    confirm_password: str | None = None
    subscription_id: str | None = None
    session_token: str | None = None


class SetupShareAccountUseCase(BaseUseCase):
    """Set a password for the link's donor, promoting a prospect if needed.

    The password is hashed before anything is written. The writes run as one
    atomic unit, so a conflict part way through leaves nothing behind.
    """

    def __init__(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        invite_service: InviteService,
        password_service: PasswordService,
        settings_service: SettingsService,
        event_service: EventService,
        transaction: TransactionManager,
    ) -> None:
        self.share_link_service = share_link_service
        self.donor_service = donor_service
        self.prospect_service = prospect_service
        self.invite_service = invite_service
        self.password_service = password_service
        self.settings_service = settings_service
        self.event_service = event_service
        self.transaction = transaction

    async def execute(self, request: SetupShareAccountRequest) -> ShareProjection:
        """Set up the account and return the refreshed projection.

        Raises:
            NotFoundError: If the link is unknown or no longer valid
            UnauthorizedError: If the session token does not match
            ValidationError: If the email or password fails validation
            ForbiddenError: If the donor's subscription has ended
            ConflictError: If the subscription id belongs to another donor
        """
        with logfire.span("setup_share_account.execute"):
            resolved = await resolve_share_link(
                request.token,
                self.share_link_service,
                self.donor_service,
                self.prospect_service,
            )
            self.share_link_service.verify_session(resolved.link, request.session_token)

            owner = resolved.donor or resolved.prospect
            email = normalize_email(
                request.email if request.email is not None else owner.email
            )
            name = (
                request.name.strip()
                if request.name is not None
                else (owner.name or "").strip()
            )
            if not email:
                raise ValidationError("Email is required to set up your account.")
            if not is_valid_email(email):
                raise ValidationError("Please provide a valid email address.")
            validate_new_password(request.password, request.confirm_password)
            resolved.require_not_blocked()

            password_hash = await self.password_service.hash_password(request.password)

            async with self.transaction.atomic():
                link = resolved.link
                if resolved.donor is not None:
                    donor = await self._update_donor(
                        resolved.donor,
                        email,
                        name,
                        request.subscription_id,
                        password_hash,
                    )
                else:
                    donor = await self._promote_prospect(
                        email, name, request.subscription_id, password_hash
                    )
                    link = await self.share_link_service.assign_to_donor(
                        link, donor.id, clear_last_used=True
                    )
                    await self.prospect_service.mark_converted(
                        resolved.prospect.id, donor.id
                    )

                link = await self.share_link_service.mark_used(link)
                await self.event_service.log(
                    "share.account.password_set",
                    {
                        "donorId": str(donor.id),
                        "shareLinkId": str(link.id),
                        "promoted": resolved.donor is None,
                    },
                )

            invite = await self.invite_service.get_latest_active(donor.id)
            paypal = await self.settings_service.paypal()
            return build_projection(paypal, link=link, donor=donor, invite=invite)

    async def _update_donor(
        self,
        donor: Donor,
        email: str,
        name: str,
        subscription_id: str | None,
        password_hash: str,
    ) -> Donor:
        donor = await self.donor_service.update_contact(donor, email=email, name=name)
        donor = await self.donor_service.update_subscription_id(donor, subscription_id)
        return await self.donor_service.set_password_hash(donor, password_hash)

    async def _promote_prospect(
        self,
        email: str,
        name: str,
        subscription_id: str | None,
        password_hash: str,
    ) -> Donor:
        existing = await self.donor_service.find_by_subscription_id(subscription_id)
        if existing is None:
            existing = await self.donor_service.find_by_email(email)

        if existing is None:
            donor = await self.donor_service.create_donor(
                email,
                name=name,
                subscription_id=(subscription_id or "").strip() or None,
                status=DonorStatus.PENDING,
                password_hash=password_hash,
            )
            logfire.info("Prospect promoted to new donor", donor_id=str(donor.id))
            return donor

        if existing.is_blocked:
            raise ForbiddenError(
                INACTIVE_MESSAGE, details={"status": existing.status.value}
            )
        logfire.info("Prospect matched existing donor", donor_id=str(existing.id))
        return await self._update_donor(
            existing, email, name, subscription_id, password_hash
        )
