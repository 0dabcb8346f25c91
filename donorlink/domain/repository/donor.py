"""Donor repository interface."""

from abc import ABC, abstractmethod

from donorlink.domain.model.donor import Donor
from donorlink.domain.value import DonorId


class DonorRepository(ABC):
    """Repository for Donor aggregate.

    Defines the contract for donor persistence operations.
    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def find_by_id(self, donor_id: DonorId) -> Donor | None:
        """Find a donor by ID.

        Args:
            donor_id: The donor's unique identifier

        Returns:
            The donor if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Donor | None:
        """Find a donor by email, ignoring case.

        Args:
            email: Email address to look up

        Returns:
            The donor if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_subscription_id(self, subscription_id: str) -> Donor | None:
        """Find a donor by payment-provider subscription id.

        Args:
            subscription_id: Provider subscription identifier

        Returns:
            The donor if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all(self) -> list[Donor]:
        """List donors, newest first."""
        pass

    @abstractmethod
    async def save(self, donor: Donor) -> Donor:
        """Save a donor (create or update).

        Args:
            donor: The donor to save

        Returns:
            The saved donor

        Raises:
            IntegrityError: If the email or subscription id is already taken
        """
        pass
