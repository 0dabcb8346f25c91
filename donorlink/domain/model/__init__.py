"""Domain model entities for DonorLink."""

from donorlink.domain.model.donor import Donor
from donorlink.domain.model.event import Event
from donorlink.domain.model.invite import Invite
from donorlink.domain.model.payment import Payment
from donorlink.domain.model.prospect import Prospect
from donorlink.domain.model.session import ServerSession
from donorlink.domain.model.settings import (
    SETTINGS_GROUPS,
    AnnouncementSettings,
    AppSettings,
    MediaServerSettings,
    PayPalSettings,
    PortalSettings,
    SettingsGroup,
    SmtpSettings,
)
from donorlink.domain.model.share_link import ShareLink

__all__ = [
    "Donor",
    "Prospect",
    "Invite",
    "ShareLink",
    "Payment",
    "Event",
    "ServerSession",
    "SettingsGroup",
    "AppSettings",
    "AnnouncementSettings",
    "PayPalSettings",
    "PortalSettings",
    "MediaServerSettings",
    "SmtpSettings",
    "SETTINGS_GROUPS",
]
