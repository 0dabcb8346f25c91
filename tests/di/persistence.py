"""Mock persistence providers for testing."""

from dishka import Scope, provide

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
from donorlink.persistence.repository.inmemory import (
    InMemoryDonorRepository,
    InMemoryEventRepository,
    InMemoryInviteRepository,
    InMemoryPaymentRepository,
    InMemoryProspectRepository,
    InMemorySessionRepository,
    InMemorySettingsRepository,
    InMemoryShareLinkRepository,
    InMemoryTransactionManager,
)
from donorlink.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Uses APP scope so state survives across request scopes of one container
    (several HTTP calls in an e2e test see the same data). Every test builds
    its own container, which keeps tests isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_in_memory_transaction_manager(
        self,
        donors: DonorRepository,
        prospects: ProspectRepository,
        invites: InviteRepository,
        share_links: ShareLinkRepository,
        payments: PaymentRepository,
        events: EventRepository,
        sessions: SessionRepository,
        settings: SettingsRepository,
    ) -> InMemoryTransactionManager:
        """Provide a transaction manager that can undo writes to every repository."""
        return InMemoryTransactionManager(
            [
                donors,
                prospects,
                invites,
                share_links,
                payments,
                events,
                sessions,
                settings,
            ]
        )

    @provide(scope=Scope.APP)
    def get_transaction_manager(
        self, manager: InMemoryTransactionManager
    ) -> TransactionManager:
        return manager

    @provide(scope=Scope.APP)
    def get_donor_repository(self) -> DonorRepository:
        """Provide in-memory donor repository."""
        return InMemoryDonorRepository()

    @provide(scope=Scope.APP)
    def get_prospect_repository(self) -> ProspectRepository:
        """Provide in-memory prospect repository."""
        return InMemoryProspectRepository()

    @provide(scope=Scope.APP)
    def get_invite_repository(self) -> InviteRepository:
        """Provide in-memory invite repository."""
        return InMemoryInviteRepository()

    @provide(scope=Scope.APP)
    def get_share_link_repository(self) -> ShareLinkRepository:
        """Provide in-memory share link repository."""
        return InMemoryShareLinkRepository()

    @provide(scope=Scope.APP)
    def get_payment_repository(self) -> PaymentRepository:
        """Provide in-memory payment repository."""
        return InMemoryPaymentRepository()

    @provide(scope=Scope.APP)
    def get_event_repository(self) -> EventRepository:
        """Provide in-memory event repository."""
        return InMemoryEventRepository()

    @provide(scope=Scope.APP)
    def get_session_repository(self) -> SessionRepository:
        """Provide in-memory admin session repository."""
        return InMemorySessionRepository()

    @provide(scope=Scope.APP)
    def get_settings_repository(self) -> SettingsRepository:
        """Provide in-memory settings repository."""
        return InMemorySettingsRepository()
