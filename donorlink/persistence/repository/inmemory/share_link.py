"""In-memory share link repository for testing."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from donorlink.domain.model.share_link import ShareLink
from donorlink.domain.repository.share_link import ShareLinkRepository
from donorlink.domain.value import DonorId, ProspectId, ShareLinkId


class InMemoryShareLinkRepository(ShareLinkRepository):
    def __init__(self) -> None:
        self._links: dict[ShareLinkId, ShareLink] = {}

    async def find_by_id(self, link_id: ShareLinkId) -> Optional[ShareLink]:
        return self._links.get(link_id)

    async def find_by_token(self, token: str) -> Optional[ShareLink]:
        for link in self._links.values():
            if link.token == token:
                return link
        return None

    async def find_by_donor(self, donor_id: DonorId) -> Optional[ShareLink]:
        for link in self._links.values():
            if link.donor_id == donor_id:
                return link
        return None

    async def find_by_prospect(self, prospect_id: ProspectId) -> Optional[ShareLink]:
        for link in self._links.values():
            if link.prospect_id == prospect_id:
                return link
        return None

    async def save(self, link: ShareLink) -> ShareLink:
        for other in self._links.values():
            if other.id != link.id and other.token == link.token:
                raise IntegrityError("Duplicate share token", None, Exception())
        self._links[link.id] = link
        return link
