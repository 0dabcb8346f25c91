"""Donor aggregate root.

A donor is a paying member whose subscription grants access to the media
server. The donor owns its invites and payments.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import BLOCKED_STATUSES, DonorId, DonorStatus


class Donor(DomainModel):
    """Donor aggregate root.

    Business rules:
    - Email is unique and stored lowercase
    - A non-null subscription id is unique
    - Only active donors may generate invites
    - Password hash stays empty until account setup
    """

    id: DonorId
    email: str
    name: str = ""
    password_hash: Optional[str] = None
    subscription_id: Optional[str] = None
    status: DonorStatus = DonorStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    last_payment_at: Optional[datetime] = None
    # Provider timestamp of the last webhook that changed the status
    last_event_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == DonorStatus.ACTIVE

    @property
    def is_blocked(self) -> bool:
        return self.status in BLOCKED_STATUSES

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
