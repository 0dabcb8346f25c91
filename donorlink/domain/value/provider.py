"""Value objects exchanged with the provider adapters."""

from datetime import datetime
from typing import Any

from pydantic import Field

from donorlink.domain.value.common import ValueObject


class PortalInviteRequest(ValueObject):
    """Input to an invite-portal invite creation.

    Only ``email`` and ``note`` are usually set. The remaining fields let an
    admin override portal defaults; ``invitation`` carries a nested payload
    whose fields take precedence over the top-level ones.
    """

    code: str | None = None
    email: str | None = None
    name: str | None = None
    note: str | None = None
    expires_in_days: float | None = None
    duration_days: float | None = None
    server: str | list[str] | None = None
    max_uses: int | None = None
    unlimited: bool | None = None
    profile: str | None = None
    libraries: list[str] | None = None
    invitation: dict[str, Any] | None = None
    extra_fields: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Heterogeneous payload in the portal's camelCase vocabulary."""
        payload: dict[str, Any] = {
            "code": self.code,
            "email": self.email,
            "name": self.name,
            "note": self.note,
            "expiresInDays": self.expires_in_days,
            "duration": self.duration_days,
            "server": self.server,
            "maxUses": self.max_uses,
            "unlimited": self.unlimited,
            "profile": self.profile,
            "libraries": self.libraries,
            "invitation": self.invitation,
            "extraFields": self.extra_fields,
        }
        return {key: value for key, value in payload.items() if value is not None}


class PortalInvite(ValueObject):
    """Normalized invite-portal creation result."""

    invite_code: str
    invite_url: str
    raw: dict[str, Any] = Field(default_factory=dict)


class PortalServer(ValueObject):
    """A server the portal offers when it needs a server selection."""

    id: int | str | None = None
    identifier: str | None = None
    name: str = ""
    type: str = ""

    def label(self) -> str:
        """``Name • TYPE (identifier)`` for admin guidance."""
        parts = [part for part in (self.name, self.type.upper()) if part]
        identifier = self.identifier or ("" if self.id is None else str(self.id))
        if parts:
            label = " • ".join(parts)
            return f"{label} ({identifier})" if identifier else label
        return identifier


class SharedLibrary(ValueObject):
    id: str | None = None
    title: str | None = None


class MediaInvite(ValueObject):
    """Normalized media-server share creation result."""

    invite_id: str | None = None
    invite_url: str | None = None
    shared_libraries: list[SharedLibrary] = Field(default_factory=list)
    status: str | None = None
    invited_at: str | None = None


class AccessChangeResult(ValueObject):
    """Outcome of a cancel/revoke call that tolerates a missing target."""

    success: bool = False
    skipped: bool = False
    reason: str | None = None
    user: dict[str, Any] | None = None


class ConnectionReport(ValueObject):
    """Result of an admin "test connection" call."""

    message: str
    status: int | None = None
    details: Any = None
    libraries: list[dict[str, Any]] | None = None


class WebhookVerification(ValueObject):
    verified: bool
    reason: str | None = None
    status: str | None = None


class CheckoutSession(ValueObject):
    """A payment-provider subscription awaiting the subscriber's approval."""

    subscription_id: str
    approval_url: str


class SubscriberDetails(ValueObject):
    """Payer identity extracted from a payment-provider resource."""

    email: str | None = None
    name: str | None = None


class ProviderSubscription(ValueObject):
    """Subscription state as reported by the payment provider."""

    id: str
    status: str | None = None
    last_payment_at: datetime | None = None
    subscriber: SubscriberDetails = Field(default_factory=SubscriberDetails)
    raw: dict[str, Any] = Field(default_factory=dict)
