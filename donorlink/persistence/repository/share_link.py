"""PostgreSQL implementation of ShareLink repository."""

from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import ShareLink
from donorlink.domain.repository import ShareLinkRepository
from donorlink.domain.value import DonorId, ProspectId, ShareLinkId
from donorlink.persistence.mappers import row_to_share_link, share_link_to_dict
from donorlink.persistence.tables import invite_links_table


class PostgresShareLinkRepository(ShareLinkRepository):
    """PostgreSQL implementation of ShareLinkRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _first(self, stmt) -> Optional[ShareLink]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_share_link(dict(row)) if row else None

    async def find_by_id(self, link_id: ShareLinkId) -> Optional[ShareLink]:
        return await self._first(
            select(invite_links_table).where(invite_links_table.c.id == link_id)
        )

    async def find_by_token(self, token: str) -> Optional[ShareLink]:
        return await self._first(
            select(invite_links_table).where(invite_links_table.c.token == token)
        )

    async def find_by_donor(self, donor_id: DonorId) -> Optional[ShareLink]:
        return await self._first(
            select(invite_links_table)
            .where(invite_links_table.c.donor_id == donor_id)
            .order_by(invite_links_table.c.created_at.desc())
        )

    async def find_by_prospect(self, prospect_id: ProspectId) -> Optional[ShareLink]:
        return await self._first(
            select(invite_links_table)
            .where(invite_links_table.c.prospect_id == prospect_id)
            .order_by(invite_links_table.c.created_at.desc())
        )

    async def save(self, link: ShareLink) -> ShareLink:
        """Save a share link (create or update).

        Args:
            link: Share link to save

        Returns:
            Saved share link
        """
        link_dict = share_link_to_dict(link)

        if await self.find_by_id(link.id):
            stmt = (
                update(invite_links_table)
                .where(invite_links_table.c.id == link.id)
                .values(**link_dict)
            )
        else:
            stmt = insert(invite_links_table).values(**link_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return link
