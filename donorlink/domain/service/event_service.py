"""Audit event domain service."""

from typing import Any
from uuid import uuid4

import logfire

from donorlink.domain.model.common import utc_now
from donorlink.domain.model.event import Event
from donorlink.domain.repository import EventRepository
from donorlink.domain.value import EventId

from .base import Service


class EventService(Service):
    """Writes and reads the append-only audit log."""

    def __init__(self, event_repository: EventRepository) -> None:
        self.event_repository = event_repository

    async def log(self, event_type: str, payload: dict[str, Any] | None = None) -> Event:
        """Append an event to the audit log.

        Args:
            event_type: Dotted event name, e.g. ``invite.created``
            payload: JSON-serializable details

        Returns:
            The stored event
        """
        with logfire.span("event_service.log", event_type=event_type):
            event = Event(
                id=EventId(uuid4()),
                event_type=event_type,
                payload=payload or {},
                occurred_at=utc_now(),
            )
            saved = await self.event_repository.append(event)
            logfire.info("Event recorded", event_type=event_type, event_id=str(saved.id))
            return saved

    async def recent(self, limit: int = 100) -> list[Event]:
        with logfire.span("event_service.recent", limit=limit):
            return await self.event_repository.find_recent(limit)
