"""Domain value objects for DonorLink."""

from donorlink.domain.value.identifiers import (
    DonorId,
    EventId,
    InviteId,
    PaymentId,
    ProspectId,
    SessionId,
    ShareLinkId,
)
from donorlink.domain.value.provider import (
    AccessChangeResult,
    CheckoutSession,
    ConnectionReport,
    MediaInvite,
    PortalInvite,
    PortalInviteRequest,
    PortalServer,
    ProviderSubscription,
    SharedLibrary,
    SubscriberDetails,
    WebhookVerification,
)
from donorlink.domain.value.types import (
    BLOCKED_STATUSES,
    MIN_PASSWORD_LENGTH,
    AnnouncementTone,
    DonorStatus,
    EmailAddress,
    is_valid_email,
    normalize_email,
)

__all__ = [
    # Identifiers
    "DonorId",
    "ProspectId",
    "InviteId",
    "ShareLinkId",
    "PaymentId",
    "EventId",
    "SessionId",
    # Types
    "DonorStatus",
    "BLOCKED_STATUSES",
    "MIN_PASSWORD_LENGTH",
    "AnnouncementTone",
    "EmailAddress",
    "normalize_email",
    "is_valid_email",
    # Provider values
    "PortalInviteRequest",
    "PortalInvite",
    "PortalServer",
    "SharedLibrary",
    "MediaInvite",
    "AccessChangeResult",
    "ConnectionReport",
    "WebhookVerification",
    "CheckoutSession",
    "SubscriberDetails",
    "ProviderSubscription",
]
