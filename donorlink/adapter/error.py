"""Infrastructure layer errors."""

from typing import Any


class AdapterError(Exception):
    """Base infrastructure error.

    Carries the provider status, parsed error details and the request
    attempts the transport recorded on the way to the failure.
    """

    kind: str = "internal"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        details: Any = None,
        attempts: list[Any] | None = None,
    ) -> None:
        self.message = message
        self.status = status
        self.details = details
        self.attempts = list(attempts or [])
        super().__init__(message)


class ProviderError(AdapterError):
    """External provider error."""

    kind = "upstream_request_failed"


class TransportError(AdapterError):
    """Network failure or timeout before a response arrived."""

    kind = "upstream_unavailable"


class EndpointNotFoundError(TransportError):
    """No candidate path answered with anything but 404/405/415."""

    pass


class ProviderNotConfiguredError(AdapterError):
    """Provider credentials are missing from the settings store."""

    kind = "service_disabled"


# =============================================================================
# INVITE PORTAL
# =============================================================================


class PortalError(ProviderError):
    """Invite portal error."""

    pass


class PortalUnreachable(PortalError):
    """No portal endpoint answered, or every attempt failed on the network."""

    kind = "upstream_unavailable"


class PortalUnauthorized(PortalError):
    """Every authentication strategy was rejected."""

    kind = "upstream_unavailable"


class PortalServerSelectionRequired(PortalError):
    """The portal offers several servers and none is configured."""

    kind = "upstream_configuration_required"

    def __init__(self, message: str, *, servers: list[Any], **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.servers = servers


class PortalRequestFailed(PortalError):
    """The portal returned a terminal non-OK response."""

    pass


# =============================================================================
# MEDIA SERVER
# =============================================================================


class MediaServerError(ProviderError):
    """Media server error."""

    pass


class MediaServerUnreachable(MediaServerError):
    """Media server or plex.tv could not be reached."""

    kind = "upstream_unavailable"


class MediaServerUnauthorized(MediaServerError):
    """The configured token was rejected."""

    kind = "upstream_unavailable"


class MediaServerRequestFailed(MediaServerError):
    """The media server returned a terminal non-OK response."""

    pass


class RecipientNotFound(MediaServerError):
    """No account exists for the invite recipient."""

    pass


# =============================================================================
# PAYMENTS AND MAIL
# =============================================================================


class PaymentProviderError(ProviderError):
    """Payment provider error."""

    pass


class MailerError(ProviderError):
    """Mail delivery error."""

    pass
