"""Payment repository interface."""

from abc import ABC, abstractmethod

from donorlink.domain.model.payment import Payment
from donorlink.domain.value import DonorId


class PaymentRepository(ABC):
    """Repository for the payment ledger."""

    @abstractmethod
    async def find_by_transaction_id(self, transaction_id: str) -> Payment | None:
        pass

    @abstractmethod
    async def find_by_donor(self, donor_id: DonorId) -> list[Payment]:
        """List a donor's payments, newest first."""
        pass

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        pass
