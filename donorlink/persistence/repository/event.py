"""PostgreSQL implementation of Event repository."""

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import Event
from donorlink.domain.repository import EventRepository
from donorlink.persistence.mappers import event_to_dict, row_to_event
from donorlink.persistence.tables import events_table


class PostgresEventRepository(EventRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(self, event: Event) -> Event:
        await self.session.execute(insert(events_table).values(**event_to_dict(event)))
        await self.session.flush()
        return event

    async def find_recent(self, limit: int = 100) -> list[Event]:
        stmt = (
            select(events_table)
            .order_by(events_table.c.occurred_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [row_to_event(dict(row)) for row in result.mappings().all()]
