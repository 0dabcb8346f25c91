"""In-memory event log for testing."""

from donorlink.domain.model.event import Event
from donorlink.domain.repository.event import EventRepository


class InMemoryEventRepository(EventRepository):
    def __init__(self) -> None:
        self.events: list[Event] = []

    async def append(self, event: Event) -> Event:
        self.events.append(event)
        return event

    async def find_recent(self, limit: int = 100) -> list[Event]:
        return list(reversed(self.events))[:limit]

    def of_type(self, event_type: str) -> list[Event]:
        """Events of one type in insertion order."""
        return [event for event in self.events if event.event_type == event_type]
