"""Share link domain service."""

import hmac
import secrets
from uuid import uuid4

import logfire

from donorlink.domain.error import NotFoundError, UnauthorizedError
from donorlink.domain.model.common import utc_now
from donorlink.domain.model.share_link import ShareLink
from donorlink.domain.repository import ShareLinkRepository
from donorlink.domain.value import DonorId, ProspectId, ShareLinkId

from .base import Service


def _mask(token: str) -> str:
    return token[:6] + "..."


class ShareLinkService(Service):
    """Domain service for share link capability tokens.

    Both the public token and the session token come from ``secrets`` and
    are URL-safe. Session tokens are compared in constant time.
    """

    def __init__(
        self, share_link_repository: ShareLinkRepository, token_bytes: int = 24
    ) -> None:
        """Initialize share link service.

        Args:
            share_link_repository: Share link repository
            token_bytes: Random bytes per token (at least 16)
        """
        self.share_link_repository = share_link_repository
        self.token_bytes = max(token_bytes, 16)

    def _new_token(self) -> str:
        return secrets.token_urlsafe(self.token_bytes)

    async def issue_for_donor(self, donor_id: DonorId) -> ShareLink:
        """Create the donor's share link, or rotate both tokens of the existing one."""
        with logfire.span("share_link_service.issue_for_donor", donor_id=str(donor_id)):
            existing = await self.share_link_repository.find_by_donor(donor_id)
            return await self._issue(existing, donor_id=donor_id)

    async def issue_for_prospect(self, prospect_id: ProspectId) -> ShareLink:
        with logfire.span(
            "share_link_service.issue_for_prospect", prospect_id=str(prospect_id)
        ):
            existing = await self.share_link_repository.find_by_prospect(prospect_id)
            return await self._issue(existing, prospect_id=prospect_id)

    async def _issue(
        self,
        existing: ShareLink | None,
        donor_id: DonorId | None = None,
        prospect_id: ProspectId | None = None,
    ) -> ShareLink:
        if existing:
            link = existing.model_copy(
                update={
                    "token": self._new_token(),
                    "session_token": self._new_token(),
                    "created_at": utc_now(),
                    "last_used_at": None,
                }
            )
        else:
            link = ShareLink(
                id=ShareLinkId(uuid4()),
                token=self._new_token(),
                session_token=self._new_token(),
                donor_id=donor_id,
                prospect_id=prospect_id,
                created_at=utc_now(),
            )
        saved = await self.share_link_repository.save(link)
        logfire.info(
            "Share link issued",
            share_link_id=str(saved.id),
            rotated=existing is not None,
        )
        return saved

    async def get_by_token(self, token: str) -> ShareLink:
        """Get a share link by its public token.

        Raises:
            NotFoundError: If no link has this token
        """
        with logfire.span("share_link_service.get_by_token", token=_mask(token)):
            link = await self.share_link_repository.find_by_token(token)
            if not link:
                logfire.warn("Share link not found", token=_mask(token))
                raise NotFoundError("Share link", _mask(token), "Share link not found")
            return link

    async def find_by_donor(self, donor_id: DonorId) -> ShareLink | None:
        with logfire.span("share_link_service.find_by_donor", donor_id=str(donor_id)):
            return await self.share_link_repository.find_by_donor(donor_id)

    def verify_session(self, link: ShareLink, provided: str | None) -> None:
        """Check the session token presented with a mutating call.

        Raises:
            UnauthorizedError: If the token is missing or does not match
        """
        candidate = (provided or "").strip()
        if not candidate or not hmac.compare_digest(
            candidate.encode("utf-8"), link.session_token.encode("utf-8")
        ):
            logfire.warn("Share session token rejected", share_link_id=str(link.id))
            raise UnauthorizedError("Invalid or missing share session token")

    async def assign_to_donor(
        self, link: ShareLink, donor_id: DonorId, clear_last_used: bool = True
    ) -> ShareLink:
        """Point a link at a donor, detaching any prospect."""
        with logfire.span(
            "share_link_service.assign_to_donor",
            share_link_id=str(link.id),
            donor_id=str(donor_id),
        ):
            updates: dict = {"donor_id": donor_id, "prospect_id": None}
            if clear_last_used:
                updates["last_used_at"] = None
            # model_copy skips validators
            reassigned = ShareLink.model_validate(
                {**link.model_dump(), **updates}
            )
            saved = await self.share_link_repository.save(reassigned)
            logfire.info(
                "Share link assigned to donor",
                share_link_id=str(link.id),
                donor_id=str(donor_id),
            )
            return saved

    async def mark_used(self, link: ShareLink) -> ShareLink:
        with logfire.span("share_link_service.mark_used", share_link_id=str(link.id)):
            return await self.share_link_repository.save(
                link.model_copy(update={"last_used_at": utc_now()})
            )
