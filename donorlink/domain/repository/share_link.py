"""Share link repository interface."""

from abc import ABC, abstractmethod

from donorlink.domain.model.share_link import ShareLink
from donorlink.domain.value import DonorId, ProspectId, ShareLinkId


class ShareLinkRepository(ABC):
    """Repository for ShareLink entity.

    Defines the contract for share link persistence operations.
    """

    @abstractmethod
    async def find_by_id(self, link_id: ShareLinkId) -> ShareLink | None:
        pass

    @abstractmethod
    async def find_by_token(self, token: str) -> ShareLink | None:
        """Find a share link by its public token.

        Args:
            token: URL token from the share link

        Returns:
            The share link if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_donor(self, donor_id: DonorId) -> ShareLink | None:
        pass

    @abstractmethod
    async def find_by_prospect(self, prospect_id: ProspectId) -> ShareLink | None:
        pass

    @abstractmethod
    async def save(self, link: ShareLink) -> ShareLink:
        """Save a share link (create or update).

        Raises:
            IntegrityError: If the token is already taken
        """
        pass
