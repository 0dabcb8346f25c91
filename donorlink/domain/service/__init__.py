"""Domain services."""

from .base import Service
from .donor_service import DonorService
from .event_service import EventService
from .invite_service import InviteService, PortalClient
from .media_server_service import MediaServerClient, MediaServerService
from .notification_service import Mailer, NotificationService
from .password_service import PasswordService, validate_new_password
from .payment_service import PaymentGateway, PaymentService
from .prospect_service import ProspectService
from .session_service import AdminSessionService, DonorSessionService
from .settings_service import (
    SettingsListener,
    SettingsService,
    coerce_value,
    normalize_group,
)
from .share_link_service import ShareLinkService

__all__ = [
    "AdminSessionService",
    "DonorService",
    "DonorSessionService",
    "EventService",
    "InviteService",
    "Mailer",
    "MediaServerClient",
    "MediaServerService",
    "NotificationService",
    "PasswordService",
    "PaymentGateway",
    "PaymentService",
    "PortalClient",
    "ProspectService",
    "Service",
    "SettingsListener",
    "SettingsService",
    "ShareLinkService",
    "coerce_value",
    "normalize_group",
    "validate_new_password",
]
