"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

import logfire
from dishka import Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from donorlink.config import Settings
from donorlink.domain.repository import (
    DonorRepository,
    EventRepository,
    InviteRepository,
    PaymentRepository,
    ProspectRepository,
    SessionRepository,
    SettingsRepository,
    ShareLinkRepository,
    TransactionManager,
)
from donorlink.persistence.database import create_engine, create_session_factory
from donorlink.persistence.repository import (
    PostgresDonorRepository,
    PostgresEventRepository,
    PostgresInviteRepository,
    PostgresPaymentRepository,
    PostgresProspectRepository,
    PostgresSessionRepository,
    PostgresSettingsRepository,
    PostgresShareLinkRepository,
    PostgresTransactionManager,
)
from donorlink.util.di.base import ProviderBase
from donorlink.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_engine(self, settings: Settings) -> AsyncEngine:
        """Provide database engine."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        return engine

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session is committed at the end of the request if no exception
        occurred, or rolled back if an exception was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
                logfire.info("Session committed")
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_transaction_manager(self, session: AsyncSession) -> TransactionManager:
        """Provide early-commit handle for the request session."""
        return PostgresTransactionManager(session)

    @provide(scope=Scope.REQUEST)
    def get_donor_repository(self, session: AsyncSession) -> DonorRepository:
        """Provide Donor repository."""
        return PostgresDonorRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_prospect_repository(self, session: AsyncSession) -> ProspectRepository:
        """Provide Prospect repository."""
        return PostgresProspectRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_invite_repository(self, session: AsyncSession) -> InviteRepository:
        """Provide Invite repository."""
        return PostgresInviteRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_share_link_repository(self, session: AsyncSession) -> ShareLinkRepository:
        """Provide ShareLink repository."""
        return PostgresShareLinkRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_payment_repository(self, session: AsyncSession) -> PaymentRepository:
        """Provide Payment repository."""
        return PostgresPaymentRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_event_repository(self, session: AsyncSession) -> EventRepository:
        """Provide Event repository."""
        return PostgresEventRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_session_repository(self, session: AsyncSession) -> SessionRepository:
        """Provide admin Session repository."""
        return PostgresSessionRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_settings_repository(self, session: AsyncSession) -> SettingsRepository:
        """Provide Settings repository."""
        return PostgresSettingsRepository(session)
