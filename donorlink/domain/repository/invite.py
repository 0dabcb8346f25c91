"""Invite repository interface."""

from abc import ABC, abstractmethod

from donorlink.domain.model.invite import Invite
from donorlink.domain.value import DonorId, InviteId


class InviteRepository(ABC):
    """Repository for Invite entity.

    Defines the contract for invite persistence operations.
    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def find_by_id(self, invite_id: InviteId) -> Invite | None:
        """Find an invite by ID.

        Args:
            invite_id: The invite's unique identifier

        Returns:
            The invite if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_latest_active_for_donor(self, donor_id: DonorId) -> Invite | None:
        """Find the newest non-revoked invite of a donor.

        Args:
            donor_id: The owning donor

        Returns:
            The invite if one is active, None otherwise
        """
        pass

    @abstractmethod
    async def find_active_by_donor(self, donor_id: DonorId) -> list[Invite]:
        """Find every non-revoked invite of a donor, newest first.

        Args:
            donor_id: The owning donor

        Returns:
            List of active invites
        """
        pass

    @abstractmethod
    async def find_by_donor(self, donor_id: DonorId) -> list[Invite]:
        """Find all invites of a donor, newest first."""
        pass

    @abstractmethod
    async def save(self, invite: Invite) -> Invite:
        """Save an invite (create or update).

        Args:
            invite: The invite to save

        Returns:
            The saved invite

        Raises:
            IntegrityError: If the portal code is already stored
        """
        pass
