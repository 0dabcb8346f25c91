"""PostgreSQL implementation of Donor repository."""

from typing import Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import Donor
from donorlink.domain.repository import DonorRepository
from donorlink.domain.value import DonorId
from donorlink.persistence.mappers import donor_to_dict, row_to_donor
from donorlink.persistence.tables import donors_table


class PostgresDonorRepository(DonorRepository):
    """PostgreSQL implementation of DonorRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _first(self, stmt) -> Optional[Donor]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_donor(dict(row)) if row else None

    async def find_by_id(self, donor_id: DonorId) -> Optional[Donor]:
        return await self._first(
            select(donors_table).where(donors_table.c.id == donor_id)
        )

    async def find_by_email(self, email: str) -> Optional[Donor]:
        """Find a donor by email.

        Emails are stored lowercase; the comparison lowercases both sides so
        rows written before normalization still match.
        """
        return await self._first(
            select(donors_table).where(
                func.lower(donors_table.c.email) == email.strip().lower()
            )
        )

    async def find_by_subscription_id(self, subscription_id: str) -> Optional[Donor]:
        return await self._first(
            select(donors_table).where(
                donors_table.c.subscription_id == subscription_id
            )
        )

    async def find_all(self) -> list[Donor]:
        stmt = select(donors_table).order_by(donors_table.c.created_at.desc())
        result = await self.session.execute(stmt)
        return [row_to_donor(dict(row)) for row in result.mappings().all()]

    async def save(self, donor: Donor) -> Donor:
        """Save a donor (create or update).

        Args:
            donor: Donor to save

        Returns:
            Saved donor
        """
        donor_dict = donor_to_dict(donor)

        existing = await self.find_by_id(donor.id)

        if existing:
            stmt = (
                update(donors_table)
                .where(donors_table.c.id == donor.id)
                .values(**donor_dict)
            )
        else:
            stmt = insert(donors_table).values(**donor_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return donor
