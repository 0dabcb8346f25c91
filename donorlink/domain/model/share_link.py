"""Share link entity.

A share link is a capability token that lets a third party complete checkout,
set up an account, or generate an invite for exactly one donor or prospect.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import DonorId, ProspectId, ShareLinkId


class ShareLink(DomainModel):
    """Share link entity.

    Business rules:
    - Exactly one of donor_id/prospect_id is set
    - Mutating calls must present session_token
    - Reassigning to a donor clears prospect_id and last_used_at
    """

    id: ShareLinkId
    token: str = Field(min_length=1)
    session_token: str = Field(min_length=1)
    donor_id: Optional[DonorId] = None
    prospect_id: Optional[ProspectId] = None
    created_at: datetime = Field(default_factory=utc_now)
    last_used_at: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_owner(self) -> "ShareLink":
        """Ensure the link points at exactly one donor or prospect."""
        if (self.donor_id is None) == (self.prospect_id is None):
            raise ValueError(
                "Share link must reference exactly one of donor_id or prospect_id"
            )
        return self
