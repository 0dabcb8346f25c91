"""In-memory donor repository for testing."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from donorlink.domain.model.donor import Donor
from donorlink.domain.repository.donor import DonorRepository
from donorlink.domain.value import DonorId


class InMemoryDonorRepository(DonorRepository):
    """In-memory implementation of DonorRepository for testing."""

    def __init__(self) -> None:
        self._donors: dict[DonorId, Donor] = {}

    async def find_by_id(self, donor_id: DonorId) -> Optional[Donor]:
        return self._donors.get(donor_id)

    async def find_by_email(self, email: str) -> Optional[Donor]:
        """Find a donor by email, ignoring case."""
        wanted = email.strip().lower()
        for donor in self._donors.values():
            if donor.email.lower() == wanted:
                return donor
        return None

    async def find_by_subscription_id(self, subscription_id: str) -> Optional[Donor]:
        for donor in self._donors.values():
            if donor.subscription_id == subscription_id:
                return donor
        return None

    async def find_all(self) -> list[Donor]:
        return sorted(self._donors.values(), key=lambda d: d.created_at, reverse=True)

    async def save(self, donor: Donor) -> Donor:
        """Save or update a donor.

        Raises:
            IntegrityError: If another donor has the email or subscription id
        """
        for other in self._donors.values():
            if other.id == donor.id:
                continue
            if other.email.lower() == donor.email.lower():
                raise IntegrityError("Duplicate donor email", None, Exception())
            if donor.subscription_id and other.subscription_id == donor.subscription_id:
                raise IntegrityError("Duplicate subscription id", None, Exception())
        self._donors[donor.id] = donor
        return donor
