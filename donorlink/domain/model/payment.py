"""Payment ledger entry."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import DonorId, PaymentId


class Payment(DomainModel):
    """A provider-reported payment. transaction_id is unique."""

    id: PaymentId
    donor_id: DonorId
    transaction_id: str
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    occurred_at: datetime = Field(default_factory=utc_now)
