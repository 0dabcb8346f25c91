"""PostgreSQL implementation of Prospect repository."""

from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import Prospect
from donorlink.domain.repository import ProspectRepository
from donorlink.domain.value import ProspectId
from donorlink.persistence.mappers import prospect_to_dict, row_to_prospect
from donorlink.persistence.tables import prospects_table


class PostgresProspectRepository(ProspectRepository):
    """PostgreSQL implementation of ProspectRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, prospect_id: ProspectId) -> Optional[Prospect]:
        stmt = select(prospects_table).where(prospects_table.c.id == prospect_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_prospect(dict(row)) if row else None

    async def find_all(self) -> list[Prospect]:
        stmt = select(prospects_table).order_by(prospects_table.c.created_at.desc())
        result = await self.session.execute(stmt)
        return [row_to_prospect(dict(row)) for row in result.mappings().all()]

    async def save(self, prospect: Prospect) -> Prospect:
        prospect_dict = prospect_to_dict(prospect)

        if await self.find_by_id(prospect.id):
            stmt = (
                update(prospects_table)
                .where(prospects_table.c.id == prospect.id)
                .values(**prospect_dict)
            )
        else:
            stmt = insert(prospects_table).values(**prospect_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return prospect
