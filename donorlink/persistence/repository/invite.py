"""PostgreSQL implementation of Invite repository."""

from typing import Optional

from sqlalchemy import and_, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import Invite
from donorlink.domain.repository import InviteRepository
from donorlink.domain.value import DonorId, InviteId
from donorlink.persistence.mappers import invite_to_dict, row_to_invite
from donorlink.persistence.tables import invites_table


class PostgresInviteRepository(InviteRepository):
    """PostgreSQL implementation of InviteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, invite_id: InviteId) -> Optional[Invite]:
        """Find an invite by ID.

        Args:
            invite_id: Invite ID to look up

        Returns:
            Invite if found, None otherwise
        """
        stmt = select(invites_table).where(invites_table.c.id == invite_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_invite(dict(row)) if row else None

    async def find_active_by_donor(self, donor_id: DonorId) -> list[Invite]:
        """Find non-revoked invites of a donor, newest first.

        Served by the partial index idx_invites_donor_active.
        """
        stmt = (
            select(invites_table)
            .where(
                and_(
                    invites_table.c.donor_id == donor_id,
                    invites_table.c.revoked_at.is_(None),
                )
            )
            .order_by(invites_table.c.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_invite(dict(row)) for row in result.mappings().all()]

    async def find_latest_active_for_donor(self, donor_id: DonorId) -> Optional[Invite]:
        active = await self.find_active_by_donor(donor_id)
        return active[0] if active else None

    async def find_by_donor(self, donor_id: DonorId) -> list[Invite]:
        stmt = (
            select(invites_table)
            .where(invites_table.c.donor_id == donor_id)
            .order_by(invites_table.c.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_invite(dict(row)) for row in result.mappings().all()]

    async def save(self, invite: Invite) -> Invite:
        """Save an invite (create or update).

        Args:
            invite: Invite to save

        Returns:
            Saved invite
        """
        invite_dict = invite_to_dict(invite)

        existing = await self.find_by_id(invite.id)

        if existing:
            stmt = (
                update(invites_table)
                .where(invites_table.c.id == invite.id)
                .values(**invite_dict)
            )
            await self.session.execute(stmt)
        else:
            stmt = insert(invites_table).values(**invite_dict)
            await self.session.execute(stmt)

        await self.session.flush()
        return invite
