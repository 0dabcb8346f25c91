"""Invite entity.

An invite is a single invitation issued through the invite portal on behalf
of a donor.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import DonorId, InviteId


class Invite(DomainModel):
    """Invite entity.

    Business rules:
    - At most one non-revoked invite per donor
    - Revocation is idempotent
    - recipient_email is the match key for reuse
    """

    id: InviteId
    donor_id: DonorId
    code: str
    url: str
    recipient_email: str
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    revoked_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None
