"""Base class for DonorLink domain services."""


class Service:
    """Marker base for domain services.

    A service owns the rules for one aggregate (donors, invites, share links,
    settings and so on) and reaches storage and providers only through the
    repository and port interfaces it is constructed with. Services are
    REQUEST-scoped and signal rule violations with ``DomainError`` subclasses.
    """
