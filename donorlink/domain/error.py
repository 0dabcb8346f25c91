"""Domain layer errors."""

from typing import Any


class DomainError(Exception):
    """Base domain error."""

    def __init__(self, message: str, *, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class UnauthorizedError(DomainError):
    """Missing or invalid credentials (share session token, admin session)."""

    pass


class ForbiddenError(DomainError):
    """The donor's status precludes the action."""

    pass


class SubscriptionInactiveError(ForbiddenError):
    """Raised when a donor without an active subscription requests an invite."""

    def __init__(self, status: str) -> None:
        super().__init__(
            "An active subscription is required to generate invites. "
            f"Current subscription status: {status}.",
            details={"status": status},
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str, message: str | None = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(message or f"{resource} not found: {identifier}")


class ConflictError(DomainError):
    """Raised when a write would break a uniqueness rule."""

    pass


class ServiceDisabledError(DomainError):
    """Raised when a provider integration is not configured."""

    pass


class WebhookVerificationError(DomainError):
    """The payment provider could not be asked to verify a webhook."""

    pass
