"""In-memory payment repository for testing."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from donorlink.domain.model.payment import Payment
from donorlink.domain.repository.payment import PaymentRepository
from donorlink.domain.value import DonorId


class InMemoryPaymentRepository(PaymentRepository):
    def __init__(self) -> None:
        self._payments: list[Payment] = []

    async def find_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        for payment in self._payments:
            if payment.transaction_id == transaction_id:
                return payment
        return None

    async def find_by_donor(self, donor_id: DonorId) -> list[Payment]:
        matches = [p for p in self._payments if p.donor_id == donor_id]
        matches.sort(key=lambda p: p.occurred_at, reverse=True)
        return matches

    async def save(self, payment: Payment) -> Payment:
        if await self.find_by_transaction_id(payment.transaction_id):
            raise IntegrityError("Duplicate transaction id", None, Exception())
        self._payments.append(payment)
        return payment
