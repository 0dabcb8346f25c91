"""Prospect repository interface."""

from abc import ABC, abstractmethod

from donorlink.domain.model.prospect import Prospect
from donorlink.domain.value import ProspectId


class ProspectRepository(ABC):
    """Repository for Prospect entity."""

    @abstractmethod
    async def find_by_id(self, prospect_id: ProspectId) -> Prospect | None:
        pass

    @abstractmethod
    async def find_all(self) -> list[Prospect]:
        """List prospects, newest first."""
        pass

    @abstractmethod
    async def save(self, prospect: Prospect) -> Prospect:
        pass
