"""Public share-link projection and link resolution."""

from datetime import datetime

from donorlink.adapter.paypal import checkout_url
from donorlink.application.usecase.base import ApiModel
from donorlink.domain.error import ForbiddenError, NotFoundError
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.invite import Invite
from donorlink.domain.model.prospect import Prospect
from donorlink.domain.model.settings import PayPalSettings
from donorlink.domain.model.share_link import ShareLink
from donorlink.domain.service import DonorService, ProspectService, ShareLinkService

INACTIVE_MESSAGE = "Subscription is not active. Contact the server admin for help."


class ShareDonorView(ApiModel):
    id: str
    email: str
    name: str
    status: str
    subscription_id: str | None
    last_payment_at: datetime | None
    has_password: bool


class ShareProspectView(ApiModel):
    id: str
    email: str
    name: str
    converted_at: datetime | None


class ShareInviteView(ApiModel):
    id: str
    code: str
    url: str
    recipient_email: str
    note: str | None
    created_at: datetime


class ShareLinkView(ApiModel):
    token: str
    session_token: str
    created_at: datetime
    last_used_at: datetime | None


class SharePayPalView(ApiModel):
    """Client-side plan context for the checkout button."""

    plan_id: str
    subscription_price: float
    currency: str
    checkout_url: str | None


class ShareProjection(ApiModel):
    donor: ShareDonorView | None = None
    prospect: ShareProspectView | None = None
    invite: ShareInviteView | None = None
    share_link: ShareLinkView | None = None
    paypal: SharePayPalView


def build_projection(
    paypal: PayPalSettings,
    link: ShareLink | None = None,
    donor: Donor | None = None,
    prospect: Prospect | None = None,
    invite: Invite | None = None,
) -> ShareProjection:
    """Assemble what an anonymous share-link holder may see."""
    return ShareProjection(
        donor=ShareDonorView(
            id=str(donor.id),
            email=donor.email,
            name=donor.name,
            status=donor.status.value,
            subscription_id=donor.subscription_id,
            last_payment_at=donor.last_payment_at,
            has_password=donor.has_password,
        )
        if donor
        else None,
        prospect=ShareProspectView(
            id=str(prospect.id),
            email=prospect.email,
            name=prospect.name,
            converted_at=prospect.converted_at,
        )
        if prospect
        else None,
        invite=ShareInviteView(
            id=str(invite.id),
            code=invite.code,
            url=invite.url,
            recipient_email=invite.recipient_email,
            note=invite.note,
            created_at=invite.created_at,
        )
        if invite
        else None,
        share_link=ShareLinkView(
            token=link.token,
            session_token=link.session_token,
            created_at=link.created_at,
            last_used_at=link.last_used_at,
        )
        if link
        else None,
        paypal=SharePayPalView(
            plan_id=paypal.plan_id,
            subscription_price=paypal.subscription_price,
            currency=paypal.currency,
            checkout_url=checkout_url(paypal.plan_id) if paypal.plan_id else None,
        ),
    )


class ResolvedShareLink:
    """A share link with whichever owner it currently points at."""

    def __init__(
        self,
        link: ShareLink,
        donor: Donor | None = None,
        prospect: Prospect | None = None,
    ) -> None:
        self.link = link
        self.donor = donor
        self.prospect = prospect

    def require_not_blocked(self) -> None:
        """Raise ForbiddenError if the attached donor's subscription has ended."""
        if self.donor is not None and self.donor.is_blocked:
            raise ForbiddenError(
                INACTIVE_MESSAGE, details={"status": self.donor.status.value}
            )


async def resolve_share_link(
    token: str,
    share_link_service: ShareLinkService,
    donor_service: DonorService,
    prospect_service: ProspectService,
) -> ResolvedShareLink:
    """Load a share link and its owner.

    Raises:
        NotFoundError: If the token is unknown or its owner no longer exists
    """
    link = await share_link_service.get_by_token(token)
    donor = await donor_service.find_donor(link.donor_id) if link.donor_id else None
    prospect = (
        await prospect_service.find_prospect(link.prospect_id)
        if link.prospect_id
        else None
    )
    if donor is None and prospect is None:
        raise NotFoundError(
            "Share link", str(link.id), "Share link is no longer valid"
        )
    return ResolvedShareLink(link, donor=donor, prospect=prospect)
