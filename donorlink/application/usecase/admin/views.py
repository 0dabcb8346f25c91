"""Admin response views."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from urllib.parse import quote

from donorlink.application.usecase.base import ApiModel
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.event import Event
from donorlink.domain.model.invite import Invite
from donorlink.domain.model.payment import Payment
from donorlink.domain.model.prospect import Prospect
from donorlink.domain.model.share_link import ShareLink


class InviteView(ApiModel):
    id: str
    code: str
    url: str
    recipient_email: str
    note: str | None
    created_at: datetime
    revoked_at: datetime | None

    @classmethod
    def of(cls, invite: Invite) -> "InviteView":
        return cls(
            id=str(invite.id),
            code=invite.code,
            url=invite.url,
            recipient_email=invite.recipient_email,
            note=invite.note,
            created_at=invite.created_at,
            revoked_at=invite.revoked_at,
        )


class PaymentView(ApiModel):
    id: str
    transaction_id: str
    amount: Decimal | None
    currency: str | None
    status: str | None
    occurred_at: datetime

    @classmethod
    def of(cls, payment: Payment) -> "PaymentView":
        return cls(
            id=str(payment.id),
            transaction_id=payment.transaction_id,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status,
            occurred_at=payment.occurred_at,
        )


class ShareLinkSummary(ApiModel):
    id: str
    token: str
    session_token: str
    url: str
    created_at: datetime
    last_used_at: datetime | None

    @classmethod
    def of(cls, link: ShareLink, public_base_url: str) -> "ShareLinkSummary":
        return cls(
            id=str(link.id),
            token=link.token,
            session_token=link.session_token,
            url=share_url(public_base_url, link.token),
            created_at=link.created_at,
            last_used_at=link.last_used_at,
        )


class SubscriberView(ApiModel):
    id: str
    email: str
    name: str
    status: str
    subscription_id: str | None
    has_password: bool
    created_at: datetime
    last_payment_at: datetime | None
    invites: list[InviteView] = []
    payments: list[PaymentView] = []
    share_link: ShareLinkSummary | None = None

    @classmethod
    def of(cls, donor: Donor, **related: Any) -> "SubscriberView":
        return cls(
            id=str(donor.id),
            email=donor.email,
            name=donor.name,
            status=donor.status.value,
            subscription_id=donor.subscription_id,
            has_password=donor.has_password,
            created_at=donor.created_at,
            last_payment_at=donor.last_payment_at,
            **related,
        )


class ProspectView(ApiModel):
    id: str
    email: str
    name: str
    note: str | None
    created_at: datetime
    converted_at: datetime | None
    converted_donor_id: str | None

    @classmethod
    def of(cls, prospect: Prospect) -> "ProspectView":
        return cls(
            id=str(prospect.id),
            email=prospect.email,
            name=prospect.name,
            note=prospect.note,
            created_at=prospect.created_at,
            converted_at=prospect.converted_at,
            converted_donor_id=(
                str(prospect.converted_donor_id) if prospect.converted_donor_id else None
            ),
        )


class EventView(ApiModel):
    id: str
    event_type: str
    payload: dict[str, Any]
    occurred_at: datetime

    @classmethod
    def of(cls, event: Event) -> "EventView":
        return cls(
            id=str(event.id),
            event_type=event.event_type,
            payload=event.payload,
            occurred_at=event.occurred_at,
        )


def share_url(public_base_url: str, token: str) -> str:
    """Absolute share URL, or a root-relative one without a public base URL."""
    path = f"/share/{quote(token, safe='')}"
    base = (public_base_url or "").strip().rstrip("/")
    return f"{base}{path}" if base else path
