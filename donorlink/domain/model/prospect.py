"""Prospect entity.

A prospect is an unverified lead attached to a share link before payment.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import DonorId, ProspectId


class Prospect(DomainModel):
    id: ProspectId
    email: str = ""
    name: str = ""
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    converted_at: Optional[datetime] = None
    converted_donor_id: Optional[DonorId] = None

    @property
    def is_converted(self) -> bool:
        return self.converted_at is not None
