"""Strongly typed identifiers for DonorLink domain entities."""

from typing import NewType
from uuid import UUID

DonorId = NewType("DonorId", UUID)
ProspectId = NewType("ProspectId", UUID)
InviteId = NewType("InviteId", UUID)
ShareLinkId = NewType("ShareLinkId", UUID)
PaymentId = NewType("PaymentId", UUID)
EventId = NewType("EventId", UUID)

# Admin sessions are keyed by an opaque random string, not a UUID
SessionId = NewType("SessionId", str)
