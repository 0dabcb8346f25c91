"""Payment domain service."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping
from uuid import uuid4

import logfire

from donorlink.domain.model.common import utc_now
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.payment import Payment
from donorlink.domain.model.settings import PayPalSettings
from donorlink.domain.repository import PaymentRepository
from donorlink.domain.value import (
    CheckoutSession,
    ConnectionReport,
    DonorId,
    PaymentId,
    ProviderSubscription,
    WebhookVerification,
)

from .base import Service


class PaymentGateway:
    """Payment-provider interface."""

    async def verify_webhook_signature(
        self,
        settings: PayPalSettings,
        headers: Mapping[str, str],
        event: dict[str, Any],
    ) -> WebhookVerification:
        """Ask the provider whether a webhook delivery is authentic.

        Returns:
            ``verified=False`` with a reason when no webhook id is configured
        """
        raise NotImplementedError

    async def get_subscription(
        self, settings: PayPalSettings, subscription_id: str
    ) -> ProviderSubscription:
        raise NotImplementedError

    async def create_subscription(
        self,
        settings: PayPalSettings,
        plan_id: str,
        subscriber: dict[str, Any] | None = None,
        return_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutSession:
        """Create a subscription that the subscriber still has to approve."""
        raise NotImplementedError

    async def verify_connection(self, settings: PayPalSettings) -> ConnectionReport:
        raise NotImplementedError


def parse_amount(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class PaymentService(Service):
    """Domain service for the payment ledger and provider calls."""

    def __init__(
        self, payment_repository: PaymentRepository, payment_gateway: PaymentGateway
    ) -> None:
        """Initialize payment service.

        Args:
            payment_repository: Payment repository
            payment_gateway: Payment-provider client
        """
        self.payment_repository = payment_repository
        self.payment_gateway = payment_gateway

    async def record_payment(
        self,
        donor: Donor,
        transaction_id: str,
        amount: Any = None,
        currency: str | None = None,
        status: str | None = None,
        occurred_at: datetime | None = None,
    ) -> Payment:
        """Append a payment to the ledger.

        A transaction id that is already recorded returns the stored entry.

        Args:
            donor: Paying donor
            transaction_id: Provider transaction id
            amount: Amount as reported (string or number)
            currency: ISO currency code
            status: Provider payment status
            occurred_at: Provider payment time

        Returns:
            The ledger entry
        """
        with logfire.span(
            "payment_service.record_payment",
            donor_id=str(donor.id),
            transaction_id=transaction_id,
        ):
            existing = await self.payment_repository.find_by_transaction_id(
                transaction_id
            )
            if existing:
                logfire.info(
                    "Payment already recorded", transaction_id=transaction_id
                )
                return existing

            payment = Payment(
                id=PaymentId(uuid4()),
                donor_id=donor.id,
                transaction_id=transaction_id,
                amount=parse_amount(amount),
                currency=currency or None,
                status=status or None,
                occurred_at=occurred_at or utc_now(),
            )
            saved = await self.payment_repository.save(payment)
            logfire.info(
                "Payment recorded",
                donor_id=str(donor.id),
                transaction_id=transaction_id,
                amount=str(saved.amount) if saved.amount is not None else None,
                currency=saved.currency,
            )
            return saved

    async def list_for_donor(self, donor_id: DonorId) -> list[Payment]:
        with logfire.span("payment_service.list_for_donor", donor_id=str(donor_id)):
            return await self.payment_repository.find_by_donor(donor_id)

    async def verify_webhook(
        self,
        settings: PayPalSettings,
        headers: Mapping[str, str],
        event: dict[str, Any],
    ) -> WebhookVerification:
        with logfire.span("payment_service.verify_webhook"):
            verification = await self.payment_gateway.verify_webhook_signature(
                settings, headers, event
            )
            if not verification.verified:
                logfire.warn(
                    "Webhook signature not verified", reason=verification.reason
                )
            return verification

    async def get_subscription(
        self, settings: PayPalSettings, subscription_id: str
    ) -> ProviderSubscription:
        with logfire.span(
            "payment_service.get_subscription", subscription_id=subscription_id
        ):
            return await self.payment_gateway.get_subscription(settings, subscription_id)

    async def create_checkout(
        self,
        settings: PayPalSettings,
        subscriber: dict[str, Any] | None = None,
        return_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutSession:
        with logfire.span("payment_service.create_checkout", plan_id=settings.plan_id):
            session = await self.payment_gateway.create_subscription(
                settings,
                settings.plan_id,
                subscriber=subscriber,
                return_url=return_url,
                cancel_url=cancel_url,
            )
            logfire.info(
                "Checkout subscription created", subscription_id=session.subscription_id
            )
            return session

    async def verify_connection(self, settings: PayPalSettings) -> ConnectionReport:
        with logfire.span("payment_service.verify_connection"):
            return await self.payment_gateway.verify_connection(settings)
