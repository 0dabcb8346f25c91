"""PostgreSQL implementation of the settings store."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.repository import SettingsRepository
from donorlink.persistence.tables import settings_table


class PostgresSettingsRepository(SettingsRepository):
    """Stores each group as one row per key."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_all(self) -> dict[str, dict[str, Any]]:
        result = await self.session.execute(select(settings_table))
        groups: dict[str, dict[str, Any]] = {}
        for row in result.mappings().all():
            groups.setdefault(row["group_name"], {})[row["key"]] = row["value"]
        return groups

    async def save_group(self, group: str, values: dict[str, Any]) -> None:
        if not values:
            return
        stmt = insert(settings_table).values(
            [{"group_name": group, "key": key, "value": value} for key, value in values.items()]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[settings_table.c.group_name, settings_table.c.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        await self.session.execute(stmt)
        await self.session.flush()
