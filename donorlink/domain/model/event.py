"""Audit event entity (append-only)."""

from datetime import datetime
from typing import Any

from pydantic import Field

from donorlink.domain.model.common import DomainModel, utc_now
from donorlink.domain.value import EventId


class Event(DomainModel):
    id: EventId
    event_type: str = Field(min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=utc_now)
