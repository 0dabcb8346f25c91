"""PostgreSQL repository implementations."""

from donorlink.persistence.repository.donor import PostgresDonorRepository
from donorlink.persistence.repository.event import PostgresEventRepository
from donorlink.persistence.repository.invite import PostgresInviteRepository
from donorlink.persistence.repository.payment import PostgresPaymentRepository
from donorlink.persistence.repository.prospect import PostgresProspectRepository
from donorlink.persistence.repository.session import PostgresSessionRepository
from donorlink.persistence.repository.settings import PostgresSettingsRepository
from donorlink.persistence.repository.share_link import PostgresShareLinkRepository
from donorlink.persistence.repository.transaction import PostgresTransactionManager

__all__ = [
    "PostgresDonorRepository",
    "PostgresProspectRepository",
    "PostgresInviteRepository",
    "PostgresShareLinkRepository",
    "PostgresPaymentRepository",
    "PostgresEventRepository",
    "PostgresSessionRepository",
    "PostgresSettingsRepository",
    "PostgresTransactionManager",
]
