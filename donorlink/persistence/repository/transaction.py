"""PostgreSQL transaction boundary."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import logfire
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.repository import TransactionManager


class PostgresTransactionManager(TransactionManager):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()
        logfire.info("Session committed early")

    async def rollback(self) -> None:
        await self.session.rollback()
        logfire.info("Session rolled back")

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Run the block inside a savepoint."""
        async with self.session.begin_nested():
            yield
