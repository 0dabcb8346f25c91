"""Server-stored sessions."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import DonorId, SessionId


class ServerSession(DomainModel):
    """A session whose id travels in a cookie.

    ``data`` marks what the session grants: ``isAdmin`` for the admin console,
    ``donorId`` for a signed-in donor.
    """

    id: SessionId
    data: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utc_now())

    @property
    def is_admin(self) -> bool:
        return self.data.get("isAdmin") is True

    @property
    def donor_id(self) -> DonorId | None:
        value = self.data.get("donorId")
        return DonorId(UUID(value)) if value else None
