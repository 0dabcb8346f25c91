"""In-memory prospect repository for testing."""

from typing import Optional

from donorlink.domain.model.prospect import Prospect
from donorlink.domain.repository.prospect import ProspectRepository
from donorlink.domain.value import ProspectId


class InMemoryProspectRepository(ProspectRepository):
    def __init__(self) -> None:
        self._prospects: dict[ProspectId, Prospect] = {}

    async def find_by_id(self, prospect_id: ProspectId) -> Optional[Prospect]:
        return self._prospects.get(prospect_id)

    async def find_all(self) -> list[Prospect]:
        return sorted(
            self._prospects.values(), key=lambda p: p.created_at, reverse=True
        )

    async def save(self, prospect: Prospect) -> Prospect:
        self._prospects[prospect.id] = prospect
        return prospect
