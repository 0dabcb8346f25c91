"""Admin audit log use case."""

import logfire
from pydantic import BaseModel, Field

from donorlink.application.usecase.admin.views import EventView
from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.domain.service import EventService


class ListEventsRequest(BaseModel):
    limit: int = Field(default=100, ge=1, le=500)


class ListEventsResponse(ApiModel):
    events: list[EventView]


class ListEventsUseCase(BaseUseCase):
    def __init__(self, event_service: EventService) -> None:
        self.event_service = event_service

    async def execute(self, request: ListEventsRequest) -> ListEventsResponse:
        with logfire.span("list_events.execute", limit=request.limit):
            events = await self.event_service.recent(request.limit)
            return ListEventsResponse(events=[EventView.of(event) for event in events])
