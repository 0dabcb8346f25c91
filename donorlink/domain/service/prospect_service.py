"""Prospect domain service."""

from uuid import uuid4

import logfire

from donorlink.domain.error import NotFoundError, ValidationError
from donorlink.domain.model.common import utc_now
from donorlink.domain.model.prospect import Prospect
from donorlink.domain.repository import ProspectRepository
from donorlink.domain.value import DonorId, ProspectId, is_valid_email, normalize_email

from .base import Service


class ProspectService(Service):
    def __init__(self, prospect_repository: ProspectRepository) -> None:
        self.prospect_repository = prospect_repository

    async def create_prospect(
        self, email: str, name: str = "", note: str | None = None
    ) -> Prospect:
        """Create a prospect for a lead who has not paid yet.

        Raises:
            ValidationError: If an email is given and it is invalid
        """
        with logfire.span("prospect_service.create_prospect"):
            normalized = normalize_email(email)
            if normalized and not is_valid_email(normalized):
                raise ValidationError("Please provide a valid email address.")
            prospect = Prospect(
                id=ProspectId(uuid4()),
                email=normalized,
                name=(name or "").strip(),
                note=(note or "").strip() or None,
                created_at=utc_now(),
            )
            saved = await self.prospect_repository.save(prospect)
            logfire.info("Prospect created", prospect_id=str(saved.id))
            return saved

    async def find_prospect(self, prospect_id: ProspectId) -> Prospect | None:
        with logfire.span("prospect_service.find_prospect", prospect_id=str(prospect_id)):
            return await self.prospect_repository.find_by_id(prospect_id)

    async def list_prospects(self) -> list[Prospect]:
        with logfire.span("prospect_service.list_prospects"):
            return await self.prospect_repository.find_all()

    async def mark_converted(self, prospect_id: ProspectId, donor_id: DonorId) -> Prospect:
        """Record that a prospect became a donor."""
        with logfire.span(
            "prospect_service.mark_converted",
            prospect_id=str(prospect_id),
            donor_id=str(donor_id),
        ):
            prospect = await self.prospect_repository.find_by_id(prospect_id)
            if not prospect:
                raise NotFoundError("Prospect", str(prospect_id))
            converted = prospect.model_copy(
                update={"converted_at": utc_now(), "converted_donor_id": donor_id}
            )
            saved = await self.prospect_repository.save(converted)
            logfire.info(
                "Prospect converted",
                prospect_id=str(prospect_id),
                donor_id=str(donor_id),
            )
            return saved
