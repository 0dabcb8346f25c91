"""In-memory invite repository for testing."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from donorlink.domain.model.invite import Invite
from donorlink.domain.repository.invite import InviteRepository
from donorlink.domain.value import DonorId, InviteId


class InMemoryInviteRepository(InviteRepository):
    """In-memory implementation of InviteRepository for testing."""

    def __init__(self) -> None:
        self._invites: list[Invite] = []

    async def find_by_id(self, invite_id: InviteId) -> Optional[Invite]:
        for invite in self._invites:
            if invite.id == invite_id:
                return invite
        return None

    async def find_by_donor(self, donor_id: DonorId) -> list[Invite]:
        matches = [invite for invite in self._invites if invite.donor_id == donor_id]
        matches.sort(key=lambda inv: inv.created_at, reverse=True)
        return matches

    async def find_active_by_donor(self, donor_id: DonorId) -> list[Invite]:
        return [
            invite for invite in await self.find_by_donor(donor_id) if invite.is_active
        ]

    async def find_latest_active_for_donor(self, donor_id: DonorId) -> Optional[Invite]:
        active = await self.find_active_by_donor(donor_id)
        return active[0] if active else None

    async def save(self, invite: Invite) -> Invite:
        """Save an invite (create or update).

        Raises:
            IntegrityError: If another invite already has this portal code
        """
        for i, existing in enumerate(self._invites):
            if existing.id == invite.id:
                self._invites[i] = invite
                return invite

        if any(existing.code == invite.code for existing in self._invites):
            raise IntegrityError("Duplicate invite code", None, Exception())

        self._invites.append(invite)
        return invite
