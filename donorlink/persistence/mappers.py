"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from donorlink.domain.model import (
    Donor,
    Event,
    Invite,
    Payment,
    Prospect,
    ServerSession,
    ShareLink,
)
from donorlink.domain.value import (
    DonorId,
    DonorStatus,
    EventId,
    InviteId,
    PaymentId,
    ProspectId,
    SessionId,
    ShareLinkId,
)


def _uuid(value: Any) -> UUID | None:
    if value is None:
        return None
    return UUID(value) if isinstance(value, str) else value


def row_to_donor(row: Dict[str, Any]) -> Donor:
    """Convert database row to Donor domain model.

    Args:
        row: Database row as dict

    Returns:
        Donor domain model
    """
    return Donor(
        id=DonorId(_uuid(row["id"])),
        email=row["email"],
        name=row.get("name") or "",
        password_hash=row.get("password_hash"),
        subscription_id=row.get("subscription_id"),
        status=DonorStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_payment_at=row.get("last_payment_at"),
        last_event_at=row.get("last_event_at"),
    )


def donor_to_dict(donor: Donor) -> Dict[str, Any]:
    """Convert Donor domain model to database dict.

    Args:
        donor: Donor domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = donor.model_dump()
    data["status"] = donor.status.value
    return data


def row_to_prospect(row: Dict[str, Any]) -> Prospect:
    converted = _uuid(row.get("converted_donor_id"))
    return Prospect(
        id=ProspectId(_uuid(row["id"])),
        email=row.get("email") or "",
        name=row.get("name") or "",
        note=row.get("note"),
        created_at=row["created_at"],
        converted_at=row.get("converted_at"),
        converted_donor_id=DonorId(converted) if converted else None,
    )


def prospect_to_dict(prospect: Prospect) -> Dict[str, Any]:
    return prospect.model_dump()


def row_to_invite(row: Dict[str, Any]) -> Invite:
    """Convert database row to Invite domain model.

    Args:
        row: Database row as dict

    Returns:
        Invite domain model
    """
    return Invite(
        id=InviteId(_uuid(row["id"])),
        donor_id=DonorId(_uuid(row["donor_id"])),
        code=row["code"],
        url=row["url"],
        recipient_email=row["recipient_email"],
        note=row.get("note"),
        created_at=row["created_at"],
        revoked_at=row.get("revoked_at"),
    )


def invite_to_dict(invite: Invite) -> Dict[str, Any]:
    return invite.model_dump()


def row_to_share_link(row: Dict[str, Any]) -> ShareLink:
    """Convert database row to ShareLink domain model.

    Args:
        row: Database row as dict

    Returns:
        ShareLink domain model
    """
    donor_id = _uuid(row.get("donor_id"))
    prospect_id = _uuid(row.get("prospect_id"))
    return ShareLink(
        id=ShareLinkId(_uuid(row["id"])),
        token=row["token"],
        session_token=row["session_token"],
        donor_id=DonorId(donor_id) if donor_id else None,
        prospect_id=ProspectId(prospect_id) if prospect_id else None,
        created_at=row["created_at"],
        last_used_at=row.get("last_used_at"),
    )


def share_link_to_dict(link: ShareLink) -> Dict[str, Any]:
    return link.model_dump()


def row_to_payment(row: Dict[str, Any]) -> Payment:
    return Payment(
        id=PaymentId(_uuid(row["id"])),
        donor_id=DonorId(_uuid(row["donor_id"])),
        transaction_id=row["transaction_id"],
        amount=row.get("amount"),
        currency=row.get("currency"),
        status=row.get("status"),
        occurred_at=row["occurred_at"],
    )


def payment_to_dict(payment: Payment) -> Dict[str, Any]:
    return payment.model_dump()


def row_to_event(row: Dict[str, Any]) -> Event:
    return Event(
        id=EventId(_uuid(row["id"])),
        event_type=row["event_type"],
        payload=row.get("payload") or {},
        occurred_at=row["occurred_at"],
    )


def event_to_dict(event: Event) -> Dict[str, Any]:
    """Convert Event to database dict; the payload is stored as JSON."""
    data = event.model_dump()
    data["payload"] = event.model_dump(mode="json")["payload"]
    return data


def row_to_session(row: Dict[str, Any]) -> ServerSession:
    return ServerSession(
        id=SessionId(row["id"]),
        data=row.get("data") or {},
        expires_at=row["expires_at"],
    )


def session_to_dict(session: ServerSession) -> Dict[str, Any]:
    return session.model_dump()
