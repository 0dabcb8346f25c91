"""PostgreSQL implementation of Payment repository."""

from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from donorlink.domain.model import Payment
from donorlink.domain.repository import PaymentRepository
from donorlink.domain.value import DonorId
from donorlink.persistence.mappers import payment_to_dict, row_to_payment
from donorlink.persistence.tables import payments_table


class PostgresPaymentRepository(PaymentRepository):
    """PostgreSQL implementation of PaymentRepository.

    The ledger is append-only; ``save`` only inserts.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        stmt = select(payments_table).where(
            payments_table.c.transaction_id == transaction_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_payment(dict(row)) if row else None

    async def find_by_donor(self, donor_id: DonorId) -> list[Payment]:
        stmt = (
            select(payments_table)
            .where(payments_table.c.donor_id == donor_id)
            .order_by(payments_table.c.occurred_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_payment(dict(row)) for row in result.mappings().all()]

    async def save(self, payment: Payment) -> Payment:
        await self.session.execute(
            insert(payments_table).values(**payment_to_dict(payment))
        )
        await self.session.flush()
        return payment
