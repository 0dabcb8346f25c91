"""Repository interfaces for the DonorLink domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from donorlink.domain.repository.donor import DonorRepository
from donorlink.domain.repository.event import EventRepository
from donorlink.domain.repository.invite import InviteRepository
from donorlink.domain.repository.payment import PaymentRepository
from donorlink.domain.repository.prospect import ProspectRepository
from donorlink.domain.repository.session import SessionRepository
from donorlink.domain.repository.settings import SettingsRepository
from donorlink.domain.repository.share_link import ShareLinkRepository
from donorlink.domain.repository.transaction import TransactionManager

__all__ = [
    "DonorRepository",
    "ProspectRepository",
    "InviteRepository",
    "ShareLinkRepository",
    "PaymentRepository",
    "EventRepository",
    "SessionRepository",
    "SettingsRepository",
    "TransactionManager",
]
