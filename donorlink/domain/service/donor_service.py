"""Donor domain service."""

from datetime import datetime
from uuid import uuid4

import logfire

from donorlink.domain.error import ConflictError, NotFoundError, ValidationError
from donorlink.domain.model.common import utc_now
from donorlink.domain.model.donor import Donor
from donorlink.domain.repository import DonorRepository
from donorlink.domain.value import DonorId, DonorStatus, is_valid_email, normalize_email

from .base import Service


class DonorService(Service):
    """Domain service for donor lifecycle and contact data."""

    def __init__(self, donor_repository: DonorRepository) -> None:
        """Initialize donor service.

        Args:
            donor_repository: Donor repository
        """
        self.donor_repository = donor_repository

    async def get_donor(self, donor_id: DonorId) -> Donor:
        """Get a donor by ID.

        Raises:
            NotFoundError: If the donor does not exist
        """
        with logfire.span("donor_service.get_donor", donor_id=str(donor_id)):
            donor = await self.donor_repository.find_by_id(donor_id)
            if not donor:
                logfire.warn("Donor not found", donor_id=str(donor_id))
                raise NotFoundError("Donor", str(donor_id))
            return donor

    async def find_donor(self, donor_id: DonorId) -> Donor | None:
        with logfire.span("donor_service.find_donor", donor_id=str(donor_id)):
            return await self.donor_repository.find_by_id(donor_id)

    async def find_by_email(self, email: str) -> Donor | None:
        with logfire.span("donor_service.find_by_email"):
            normalized = normalize_email(email)
            if not normalized:
                return None
            return await self.donor_repository.find_by_email(normalized)

    async def find_by_subscription_id(self, subscription_id: str | None) -> Donor | None:
        with logfire.span(
            "donor_service.find_by_subscription_id", subscription_id=subscription_id
        ):
            if not subscription_id or not subscription_id.strip():
                return None
            return await self.donor_repository.find_by_subscription_id(
                subscription_id.strip()
            )

    async def list_donors(self) -> list[Donor]:
        with logfire.span("donor_service.list_donors"):
            donors = await self.donor_repository.find_all()
            logfire.info("Donors listed", count=len(donors))
            return donors

    async def create_donor(
        self,
        email: str,
        name: str = "",
        subscription_id: str | None = None,
        status: DonorStatus = DonorStatus.PENDING,
        password_hash: str | None = None,
    ) -> Donor:
        """Create a donor.

        Args:
            email: Contact email (normalized to lowercase)
            name: Display name
            subscription_id: Payment-provider subscription id
            status: Initial status
            password_hash: Serialized password hash, if the account is set up

        Returns:
            Created donor

        Raises:
            ValidationError: If the email is invalid
            ConflictError: If the email or subscription id is taken
        """
        with logfire.span("donor_service.create_donor", status=status.value):
            normalized = normalize_email(email)
            if not is_valid_email(normalized):
                raise ValidationError("Please provide a valid email address.")

            if await self.donor_repository.find_by_email(normalized):
                logfire.warn("Donor email already registered")
                raise ConflictError("A donor with this email already exists.")
            if subscription_id and await self.donor_repository.find_by_subscription_id(
                subscription_id
            ):
                raise ConflictError("A donor with this subscription already exists.")

            now = utc_now()
            donor = Donor(
                id=DonorId(uuid4()),
                email=normalized,
                name=(name or "").strip(),
                subscription_id=subscription_id or None,
                status=status,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            saved = await self.donor_repository.save(donor)
            logfire.info("Donor created", donor_id=str(saved.id), status=status.value)
            return saved

    async def update_contact(
        self, donor: Donor, email: str | None = None, name: str | None = None
    ) -> Donor:
        """Update email and/or name when they differ from the stored values.

        Applying the same inputs twice is a no-op. The id and subscription id
        are never touched.

        Raises:
            ConflictError: If the new email belongs to another donor
        """
        with logfire.span("donor_service.update_contact", donor_id=str(donor.id)):
            updates: dict = {}
            normalized = normalize_email(email)
            if normalized and normalized != normalize_email(donor.email):
                other = await self.donor_repository.find_by_email(normalized)
                if other and other.id != donor.id:
                    raise ConflictError("A donor with this email already exists.")
                updates["email"] = normalized
            trimmed = (name or "").strip()
            if trimmed and trimmed != (donor.name or "").strip():
                updates["name"] = trimmed

            if not updates:
                return donor

            updates["updated_at"] = utc_now()
            updated = await self.donor_repository.save(donor.model_copy(update=updates))
            logfire.info(
                "Donor contact updated",
                donor_id=str(donor.id),
                fields=sorted(k for k in updates if k != "updated_at"),
            )
            return updated

    async def update_subscription_id(
        self, donor: Donor, subscription_id: str | None
    ) -> Donor:
        with logfire.span(
            "donor_service.update_subscription_id",
            donor_id=str(donor.id),
            subscription_id=subscription_id,
        ):
            cleaned = (subscription_id or "").strip()
            if not cleaned or cleaned == donor.subscription_id:
                return donor
            other = await self.donor_repository.find_by_subscription_id(cleaned)
            if other and other.id != donor.id:
                raise ConflictError("A donor with this subscription already exists.")
            updated = await self.donor_repository.save(
                donor.model_copy(
                    update={"subscription_id": cleaned, "updated_at": utc_now()}
                )
            )
            logfire.info("Donor subscription linked", donor_id=str(donor.id))
            return updated

    async def set_password_hash(self, donor: Donor, password_hash: str) -> Donor:
        with logfire.span("donor_service.set_password_hash", donor_id=str(donor.id)):
            updated = await self.donor_repository.save(
                donor.model_copy(
                    update={"password_hash": password_hash, "updated_at": utc_now()}
                )
            )
            logfire.info("Donor password set", donor_id=str(donor.id))
            return updated

    async def update_status(
        self,
        donor: Donor,
        status: DonorStatus,
        *,
        last_payment_at: datetime | None = None,
        event_time: datetime | None = None,
    ) -> Donor:
        """Move a donor to a new status.

        Args:
            donor: Donor to update
            status: Target status
            last_payment_at: Payment time to record, if any
            event_time: Provider timestamp of the triggering event

        Returns:
            Updated donor
        """
        with logfire.span(
            "donor_service.update_status",
            donor_id=str(donor.id),
            from_status=donor.status.value,
            to_status=status.value,
        ):
            updates: dict = {"status": status, "updated_at": utc_now()}
            if last_payment_at is not None:
                updates["last_payment_at"] = last_payment_at
            if event_time is not None:
                updates["last_event_at"] = event_time
            updated = await self.donor_repository.save(donor.model_copy(update=updates))
            logfire.info(
                "Donor status changed",
                donor_id=str(donor.id),
                from_status=donor.status.value,
                to_status=status.value,
            )
            return updated
