"""PostgreSQL implementation of the session store."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import ServerSession
from donorlink.domain.repository import SessionRepository
from donorlink.domain.value import SessionId
from donorlink.persistence.mappers import row_to_session, session_to_dict
from donorlink.persistence.tables import sessions_table


class PostgresSessionRepository(SessionRepository):
    """PostgreSQL implementation of SessionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, session_id: SessionId) -> Optional[ServerSession]:
        stmt = select(sessions_table).where(sessions_table.c.id == session_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_session(dict(row)) if row else None

    async def save(self, session: ServerSession) -> ServerSession:
        values = session_to_dict(session)
        stmt = insert(sessions_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[sessions_table.c.id],
            set_={"data": stmt.excluded.data, "expires_at": stmt.excluded.expires_at},
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return session

    async def delete(self, session_id: SessionId) -> None:
        await self.session.execute(
            delete(sessions_table).where(sessions_table.c.id == session_id)
        )
        await self.session.flush()

    async def delete_expired(self, now: datetime) -> int:
        result = await self.session.execute(
            delete(sessions_table).where(sessions_table.c.expires_at <= now)
        )
        await self.session.flush()
        return result.rowcount or 0
