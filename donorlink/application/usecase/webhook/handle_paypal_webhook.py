"""Handle PayPal webhook use case."""

from datetime import UTC, datetime
from typing import Any

import logfire
from pydantic import BaseModel, Field

from donorlink.adapter.error import AdapterError
from donorlink.adapter.paypal import parse_subscription
from donorlink.application.usecase.base import BaseUseCase
from donorlink.application.usecase.lifecycle import (
    AccessController,
    SubscriptionEventExecutor,
)
from donorlink.domain.error import (
    DomainError,
    ValidationError,
    WebhookVerificationError,
)
from donorlink.domain.model.donor import Donor
from donorlink.domain.repository import TransactionManager
from donorlink.domain.service import (
    DonorService,
    EventService,
    PaymentService,
    SettingsService,
)
from donorlink.domain.value import DonorStatus, normalize_email

SUBSCRIPTION_EVENTS = frozenset(
    {
        "BILLING.SUBSCRIPTION.CREATED",
        "BILLING.SUBSCRIPTION.ACTIVATED",
        "BILLING.SUBSCRIPTION.RE-ACTIVATED",
        "BILLING.SUBSCRIPTION.UPDATED",
        "BILLING.SUBSCRIPTION.SUSPENDED",
        "BILLING.SUBSCRIPTION.CANCELLED",
        "BILLING.SUBSCRIPTION.EXPIRED",
    }
)
PAYMENT_EVENTS = frozenset({"PAYMENT.SALE.COMPLETED", "PAYMENT.CAPTURE.COMPLETED"})

# Unknown subscriptions only create a donor on these
DONOR_CREATING_EVENTS = frozenset(
    {"BILLING.SUBSCRIPTION.CREATED", "BILLING.SUBSCRIPTION.ACTIVATED"}
)

EVENT_STATUS = {
    "BILLING.SUBSCRIPTION.ACTIVATED": DonorStatus.ACTIVE,
    "BILLING.SUBSCRIPTION.RE-ACTIVATED": DonorStatus.ACTIVE,
    "BILLING.SUBSCRIPTION.SUSPENDED": DonorStatus.SUSPENDED,
    "BILLING.SUBSCRIPTION.CANCELLED": DonorStatus.CANCELLED,
    "BILLING.SUBSCRIPTION.EXPIRED": DonorStatus.EXPIRED,
}


def parse_event_time(value: Any) -> datetime | None:
    """Parse a PayPal ``create_time`` as an aware UTC datetime.

    A value without an offset is taken as UTC. Unparseable values give None.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def subscription_key(event: dict[str, Any]) -> str | None:
    """Subscription id an event belongs to, used as the ordering key."""
    event_type = event.get("event_type")
    resource = event.get("resource") or {}
    if not isinstance(resource, dict):
        return None
    if event_type in PAYMENT_EVENTS:
        candidate = resource.get("billing_agreement_id") or resource.get(
            "subscription_id"
        )
    else:
        candidate = resource.get("id") or resource.get("subscription_id")
    if not candidate:
        return None
    return str(candidate).strip() or None


def _payment_amount(resource: dict[str, Any]) -> tuple[Any, str | None]:
    amount = resource.get("amount") or {}
    if not isinstance(amount, dict):
        return None, None
    return (
        amount.get("total") or amount.get("value"),
        amount.get("currency") or amount.get("currency_code"),
    )


def _payer_email(resource: dict[str, Any]) -> str:
    payer = resource.get("payer") or resource.get("subscriber") or {}
    if isinstance(payer, dict):
        info = payer.get("payer_info") or {}
        return normalize_email(
            payer.get("email_address") or info.get("email") or resource.get("payer_email")
        )
    return ""


class HandlePayPalWebhookRequest(BaseModel):
    """A webhook delivery: transmission headers and the parsed event."""

    headers: dict[str, str] = Field(default_factory=dict)
    event: dict[str, Any]


class HandlePayPalWebhookResponse(BaseModel):
    received: bool = True


class HandlePayPalWebhookUseCase(BaseUseCase):
    """Verifies a PayPal webhook and applies it to the donor state machine.

    Deliveries for one subscription are processed one at a time. A state
    transition only applies when the event is not older than the last one
    applied to the donor; payments and audit events are always appended.
    Processing failures are written to the audit log and the delivery is
    still acknowledged, so PayPal does not redeliver.
    """

    def __init__(
        self,
        donor_service: DonorService,
        payment_service: PaymentService,
        settings_service: SettingsService,
        event_service: EventService,
        access_controller: AccessController,
        executor: SubscriptionEventExecutor,
        transaction: TransactionManager,
    ) -> None:
        """Initialize use case.

        Args:
            donor_service: Donor domain service
            payment_service: Payment domain service
            settings_service: Runtime settings store
            event_service: Audit log
            access_controller: Invite issuance and revocation
            executor: Per-subscription serial executor
            transaction: Commit point used before the ordering lock is released
        """
        self.donor_service = donor_service
        self.payment_service = payment_service
        self.settings_service = settings_service
        self.event_service = event_service
        self.access_controller = access_controller
        self.executor = executor
        self.transaction = transaction

    async def execute(
        self, request: HandlePayPalWebhookRequest
    ) -> HandlePayPalWebhookResponse:
        """Verify and process one delivery.

        Raises:
            ValidationError: If PayPal reports the signature as invalid
            WebhookVerificationError: If the verification call itself failed
        """
        event = request.event
        event_type = str(event.get("event_type") or "")
        with logfire.span("handle_paypal_webhook.execute", event_type=event_type):
            await self.event_service.log(
                "paypal.webhook.received",
                {"id": event.get("id"), "eventType": event_type},
            )
            await self.transaction.commit()

            paypal = await self.settings_service.paypal()
            try:
                verification = await self.payment_service.verify_webhook(
                    paypal, request.headers, event
                )
            except AdapterError as e:
                logfire.error("PayPal webhook verification error", error=str(e))
                raise WebhookVerificationError(
                    "Webhook verification failed", details={"reason": e.message}
                ) from e
            if not verification.verified:
                raise ValidationError(
                    "Webhook signature invalid",
                    details={"reason": verification.reason},
                )

            key = subscription_key(event)
            await self.executor.run(key, lambda: self._process_and_commit(event))
            return HandlePayPalWebhookResponse(received=True)

    async def _process_and_commit(self, event: dict[str, Any]) -> None:
        try:
            await self._process(event)
        except (AdapterError, DomainError) as e:
            logfire.error(
                "PayPal webhook processing failed",
                event_type=event.get("event_type"),
                error=str(e),
            )
            await self.event_service.log(
                "paypal.webhook.error",
                {
                    "id": event.get("id"),
                    "eventType": event.get("event_type"),
                    "error": str(e),
                },
            )
        await self.transaction.commit()

    async def _process(self, event: dict[str, Any]) -> None:
        event_type = str(event.get("event_type") or "")
        if event_type in SUBSCRIPTION_EVENTS:
            await self._handle_subscription(event)
        elif event_type in PAYMENT_EVENTS:
            await self._handle_payment(event)
        else:
            logfire.info("Unhandled PayPal event type", event_type=event_type)
            await self.event_service.log(
                "paypal.webhook.unhandled",
                {"id": event.get("id"), "eventType": event_type},
            )

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def _match_donor(self, subscription_id: str | None, email: str) -> Donor | None:
        donor = await self.donor_service.find_by_subscription_id(subscription_id)
        if donor is None and email:
            donor = await self.donor_service.find_by_email(email)
            if donor is not None and subscription_id:
                donor = await self.donor_service.update_subscription_id(
                    donor, subscription_id
                )
        return donor

    async def _handle_subscription(self, event: dict[str, Any]) -> None:
        event_type = event["event_type"]
        subscription = parse_subscription(event.get("resource") or {})
        subscription_id = subscription.id or None
        email = normalize_email(subscription.subscriber.email)
        event_time = parse_event_time(event.get("create_time"))

        donor = await self._match_donor(subscription_id, email)
        if donor is None:
            if event_type not in DONOR_CREATING_EVENTS or not email:
                await self._unmatched(event, subscription_id)
                return
            donor = await self.donor_service.create_donor(
                email,
                name=subscription.subscriber.name or "",
                subscription_id=subscription_id,
                status=DonorStatus.PENDING,
            )

        target = EVENT_STATUS.get(event_type)
        if target is None and event_type == "BILLING.SUBSCRIPTION.UPDATED":
            target = DonorStatus.parse(subscription.status)

        payload = {
            "subscriptionId": subscription_id,
            "status": (subscription.status or "").lower(),
            "donorId": str(donor.id),
            "eventType": event_type,
        }
        if target is None:
            await self.event_service.log("paypal.subscription.updated", payload)
            return
        if self._is_stale(donor, event_time):
            await self.event_service.log(
                "paypal.subscription.updated", {**payload, "stale": True}
            )
            return

        donor = await self.donor_service.update_status(
            donor,
            target,
            last_payment_at=subscription.last_payment_at,
            event_time=event_time,
        )
        await self.event_service.log("paypal.subscription.updated", payload)
        await self._apply_access(donor, event_type)

    # =========================================================================
    # Payments
    # =========================================================================

    async def _handle_payment(self, event: dict[str, Any]) -> None:
        resource = event.get("resource") or {}
        subscription_id = subscription_key(event)
        email = _payer_email(resource)
        event_time = parse_event_time(event.get("create_time"))

        donor = await self._match_donor(subscription_id, email)
        if donor is None:
            await self._unmatched(event, subscription_id)
            return

        amount, currency = _payment_amount(resource)
        occurred_at = parse_event_time(resource.get("create_time")) or event_time
        transaction_id = str(resource.get("id") or event.get("id") or "")
        payment = await self.payment_service.record_payment(
            donor,
            transaction_id,
            amount=amount,
            currency=currency,
            status=resource.get("state") or resource.get("status"),
            occurred_at=occurred_at,
        )
        await self.event_service.log(
            "paypal.payment.recorded",
            {
                "donorId": str(donor.id),
                "subscriptionId": subscription_id,
                "transactionId": payment.transaction_id,
                "amount": str(payment.amount) if payment.amount is not None else None,
                "currency": payment.currency,
            },
        )

        if self._is_stale(donor, event_time):
            logfire.info("Stale payment event, status unchanged", donor_id=str(donor.id))
            return
        donor = await self.donor_service.update_status(
            donor,
            DonorStatus.ACTIVE,
            last_payment_at=payment.occurred_at,
            event_time=event_time,
        )
        await self._apply_access(donor, event["event_type"])

    # =========================================================================
    # Shared
    # =========================================================================

    @staticmethod
    def _is_stale(donor: Donor, event_time: datetime | None) -> bool:
        if event_time is None or donor.last_event_at is None:
            return False
        return event_time < donor.last_event_at

    async def _apply_access(self, donor: Donor, event_type: str) -> None:
        if donor.status == DonorStatus.ACTIVE:
            await self.access_controller.ensure_invite(
                donor, note=f"Subscription {donor.subscription_id or donor.email}"
            )
        elif donor.status == DonorStatus.SUSPENDED:
            await self.access_controller.revoke_access(
                donor, event_type, revoke_media_user=False, notify=False
            )
        elif donor.status in (DonorStatus.CANCELLED, DonorStatus.EXPIRED):
            await self.access_controller.revoke_access(donor, event_type)

    async def _unmatched(self, event: dict[str, Any], subscription_id: str | None) -> None:
        logfire.warn(
            "PayPal event matched no donor",
            event_type=event.get("event_type"),
            subscription_id=subscription_id,
        )
        await self.event_service.log(
            "paypal.webhook.unmatched",
            {
                "id": event.get("id"),
                "eventType": event.get("event_type"),
                "subscriptionId": subscription_id,
            },
        )
