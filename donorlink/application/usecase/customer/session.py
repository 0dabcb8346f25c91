"""Donor sign-in use cases."""

import logfire

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.application.usecase.customer.dashboard import (
    CustomerDashboard,
    CustomerSessionRequest,
    build_dashboard,
    find_signed_in_donor,
)
from donorlink.domain.error import UnauthorizedError, ValidationError
from donorlink.domain.service import (
    DonorService,
    DonorSessionService,
    InviteService,
    PasswordService,
    SettingsService,
)
from donorlink.domain.value import is_valid_email, normalize_email

INVALID_CREDENTIALS = "Invalid email or password."
NOT_SET_UP = (
    "This account is not yet set up. Follow your invite link to create a password."
)


class CustomerLoginRequest(ApiModel):
    email: str = ""
    password: str = ""


class CustomerLoginUseCase(BaseUseCase):
    """Sign a donor in with the password set through their share link."""

    def __init__(
        self,
        donor_service: DonorService,
        password_service: PasswordService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
    ) -> None:
        self.donor_service = donor_service
        self.password_service = password_service
        self.donor_session_service = donor_session_service
        self.invite_service = invite_service
        self.settings_service = settings_service

    async def execute(self, request: CustomerLoginRequest) -> CustomerDashboard:
        """Check the credentials and open a donor session.

        Unknown emails and wrong passwords give the same answer.

        Raises:
            ValidationError: If the email or password is missing, or the email
                is malformed
            UnauthorizedError: If the credentials do not match, or the donor
                has not set a password yet
        """
        with logfire.span("customer_login.execute"):
            email = normalize_email(request.email)
            if not email or not request.password:
                raise ValidationError("Email and password are required to sign in.")
            if not is_valid_email(email):
                raise ValidationError("Please provide a valid email address.")

            donor = await self.donor_service.find_by_email(email)
            if donor is None:
                logfire.info("Donor login rejected", reason="unknown_email")
                raise UnauthorizedError(INVALID_CREDENTIALS)
            if not donor.has_password:
                raise UnauthorizedError(NOT_SET_UP)
            if not await self.password_service.verify_password(
                request.password, donor.password_hash
            ):
                logfire.info(
                    "Donor login rejected", reason="password", donor_id=str(donor.id)
                )
                raise UnauthorizedError(INVALID_CREDENTIALS)

            session = await self.donor_session_service.open(donor.id)
            return await build_dashboard(
                self.settings_service,
                self.invite_service,
                donor,
                session_id=str(session.id),
            )


class CustomerLogoutUseCase(BaseUseCase):
    def __init__(self, donor_session_service: DonorSessionService) -> None:
        self.donor_session_service = donor_session_service

    async def execute(self, request: CustomerSessionRequest) -> CustomerDashboard:
        with logfire.span("customer_logout.execute"):
            await self.donor_session_service.close(request.session_id)
            return CustomerDashboard(authenticated=False)


class GetCustomerSessionUseCase(BaseUseCase):
    """Report the signed-in donor's dashboard. Never raises for a bad cookie."""

    def __init__(
        self,
        donor_service: DonorService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
    ) -> None:
        self.donor_service = donor_service
        self.donor_session_service = donor_session_service
        self.invite_service = invite_service
        self.settings_service = settings_service

    async def execute(self, request: CustomerSessionRequest) -> CustomerDashboard:
        with logfire.span("get_customer_session.execute"):
            donor = await find_signed_in_donor(
                self.donor_session_service, self.donor_service, request.session_id
            )
            if donor is None:
                return CustomerDashboard(authenticated=False)
            return await build_dashboard(
                self.settings_service, self.invite_service, donor
            )
