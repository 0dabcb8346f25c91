"""Admin-editable provider settings.

The settings store keeps one record per group. Each group is a closed,
typed model whose wire names are camelCase (``publicBaseUrl``) so that
stored payloads and admin requests share one vocabulary.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SettingsGroup(BaseModel):
    """Base class for a normalized settings group."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_values(self) -> dict:
        """Camel-cased mapping as persisted and exposed to admins."""
        return self.model_dump(by_alias=True)


class AppSettings(SettingsGroup):
    public_base_url: str = ""


class AnnouncementSettings(SettingsGroup):
    banner_enabled: bool = False
    banner_title: str = ""
    banner_body: str = ""
    banner_tone: str = "info"
    banner_dismissible: bool = True
    banner_cta_enabled: bool = False
    banner_cta_label: str = ""
    banner_cta_url: str = ""
    banner_cta_open_in_new_tab: bool = True


class PayPalSettings(SettingsGroup):
    client_id: str = ""
    client_secret: str = ""
    webhook_id: str = ""
    api_base: str = "https://api-m.sandbox.paypal.com"
    plan_id: str = ""
    product_id: str = ""
    subscription_price: float = 0.0
    currency: str = "USD"

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


class PortalSettings(SettingsGroup):
    """Invite-portal connection and invite defaults.

    ``default_server_ids`` and ``default_libraries`` are comma-separated
    lists as typed by the admin.
    """

    base_url: str = ""
    api_key: str = ""
    default_duration_days: float = 7.0
    default_server_ids: str = ""
    default_profile: str = ""
    default_libraries: str = ""
    invite_path: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)


class MediaServerSettings(SettingsGroup):
    base_url: str = ""
    token: str = ""
    server_identifier: str = ""
    library_section_ids: str = ""
    allow_sync: bool = False
    allow_camera_upload: bool = False
    allow_channels: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.token)


class SmtpSettings(SettingsGroup):
    host: str = ""
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = Field(default="", alias="pass")
    from_address: str = Field(default="", alias="from")

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.from_address)


# Group name -> model, in display order
SETTINGS_GROUPS: dict[str, type[SettingsGroup]] = {
    "app": AppSettings,
    "announcements": AnnouncementSettings,
    "paypal": PayPalSettings,
    "portal": PortalSettings,
    "mediaServer": MediaServerSettings,
    "smtp": SmtpSettings,
}
