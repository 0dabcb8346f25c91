"""Event repository interface."""

from abc import ABC, abstractmethod

from donorlink.domain.model.event import Event


class EventRepository(ABC):
    """Append-only audit log."""

    @abstractmethod
    async def append(self, event: Event) -> Event:
        pass

    @abstractmethod
    async def find_recent(self, limit: int = 100) -> list[Event]:
        """List the most recent events, newest first.

        Args:
            limit: Maximum number of results

        Returns:
            List of events
        """
        pass
