"""Signed-in donor dashboard."""

from pydantic import BaseModel

from donorlink.application.usecase.base import ApiModel
from donorlink.application.usecase.share.projection import (
    ShareDonorView,
    ShareInviteView,
    SharePayPalView,
    build_projection,
)
from donorlink.domain.error import UnauthorizedError
from donorlink.domain.model.donor import Donor
from donorlink.domain.service import (
    DonorService,
    DonorSessionService,
    InviteService,
    SettingsService,
)


class CustomerSessionRequest(BaseModel):
    session_id: str | None = None


class CustomerDashboard(ApiModel):
    """What a donor sees about their own account.

    ``session_id`` is only used by the route to set the cookie and is never
    serialized.
    """

    authenticated: bool
    donor: ShareDonorView | None = None
    invite: ShareInviteView | None = None
    paypal: SharePayPalView | None = None
    portal_url: str | None = None
    session_id: str | None = None

    def public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude={"session_id"})


async def build_dashboard(
    settings_service: SettingsService,
    invite_service: InviteService,
    donor: Donor,
    session_id: str | None = None,
) -> CustomerDashboard:
    invite = await invite_service.get_latest_active(donor.id)
    paypal = await settings_service.paypal()
    portal = await settings_service.portal()
    projection = build_projection(paypal, donor=donor, invite=invite)
    return CustomerDashboard(
        authenticated=True,
        donor=projection.donor,
        invite=projection.invite,
        paypal=projection.paypal,
        portal_url=portal.base_url or None,
        session_id=session_id,
    )


async def find_signed_in_donor(
    donor_session_service: DonorSessionService,
    donor_service: DonorService,
    session_id: str | None,
) -> Donor | None:
    """Donor behind the session cookie.

    A session whose donor was deleted is closed.
    """
    donor_id = await donor_session_service.find_donor_id(session_id)
    if donor_id is None:
        return None
    donor = await donor_service.find_donor(donor_id)
    if donor is None:
        await donor_session_service.close(session_id)
    return donor


async def require_signed_in_donor(
    donor_session_service: DonorSessionService,
    donor_service: DonorService,
    session_id: str | None,
) -> Donor:
    """Raises UnauthorizedError unless the cookie carries a live donor session."""
    donor = await find_signed_in_donor(donor_session_service, donor_service, session_id)
    if donor is None:
        raise UnauthorizedError("Authentication required")
    return donor
