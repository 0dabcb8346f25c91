"""In-memory repository implementations for testing."""

from .donor import InMemoryDonorRepository
from .event import InMemoryEventRepository
from .invite import InMemoryInviteRepository
from .payment import InMemoryPaymentRepository
from .prospect import InMemoryProspectRepository
from .session import InMemorySessionRepository
from .settings import InMemorySettingsRepository
from .share_link import InMemoryShareLinkRepository
from .transaction import InMemoryTransactionManager

__all__ = [
    "InMemoryDonorRepository",
    "InMemoryEventRepository",
    "InMemoryInviteRepository",
    "InMemoryPaymentRepository",
    "InMemoryProspectRepository",
    "InMemorySessionRepository",
    "InMemorySettingsRepository",
    "InMemoryShareLinkRepository",
    "InMemoryTransactionManager",
]
