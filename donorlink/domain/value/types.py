"""Domain value types for DonorLink.

Value types are immutable and validated on construction.
"""

import re
from enum import Enum

from pydantic import field_validator

from donorlink.domain.value.common import RootValueObject

# Exactly one "@", non-empty local and host parts, dotted host
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 8


class DonorStatus(str, Enum):
    """Subscription state of a donor."""

    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"
    EXPIRED = "expired"

    @classmethod
    def parse(cls, value: str | None) -> "DonorStatus | None":
        """Parse a provider status string, ignoring case. Unknown values give None."""
        normalized = (value or "").strip().lower()
        for status in cls:
            if status.value == normalized:
                return status
        return None


# A donor in one of these states cannot use share links to act
BLOCKED_STATUSES = frozenset(
    {DonorStatus.CANCELLED, DonorStatus.SUSPENDED, DonorStatus.EXPIRED}
)


class AnnouncementTone(str, Enum):
    """Visual tone of the public announcement banner."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    NEUTRAL = "neutral"


class EmailAddress(RootValueObject[str]):
    """Email address, trimmed and lowercased."""

    @field_validator("root")
    @classmethod
    def validate_email(cls, v: str) -> str:
        normalized = v.strip().lower()
        if not EMAIL_PATTERN.match(normalized):
            raise ValueError("Please provide a valid email address")
        return normalized


def normalize_email(value: str | None) -> str:
    """Trim and lowercase an email address (no validation)."""
    return (value or "").strip().lower()


def is_valid_email(value: str | None) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value or "") is not None
