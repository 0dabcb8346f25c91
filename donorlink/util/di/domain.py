"""Domain layer DI providers."""

from dishka import Scope, provide

from donorlink.adapter.mediaserver import MediaServerCache
from donorlink.config import Settings
from donorlink.domain.repository import (
    DonorRepository,
    EventRepository,
    InviteRepository,
    PaymentRepository,
    ProspectRepository,
    SessionRepository,
    SettingsRepository,
    ShareLinkRepository,
)
from donorlink.domain.service import (
    AdminSessionService,
    DonorService,
    DonorSessionService,
    EventService,
    InviteService,
    Mailer,
    MediaServerClient,
    MediaServerService,
    NotificationService,
    PasswordService,
    PaymentGateway,
    PaymentService,
    PortalClient,
    ProspectService,
    SettingsService,
    ShareLinkService,
)
from donorlink.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_settings_service(
        self, settings_repository: SettingsRepository, cache: MediaServerCache
    ) -> SettingsService:
        """Provide runtime settings service.

        The media-server cache listens for changes so discovery results
        never outlive the credentials they were made with.
        """
        return SettingsService(settings_repository, listeners=[cache])

    @provide
    def get_donor_service(self, donor_repository: DonorRepository) -> DonorService:
        """Provide donor domain service."""
        return DonorService(donor_repository)

    @provide
    def get_prospect_service(
        self, prospect_repository: ProspectRepository
    ) -> ProspectService:
        """Provide prospect domain service."""
        return ProspectService(prospect_repository)

    @provide
    def get_invite_service(
        self, invite_repository: InviteRepository, portal_client: PortalClient
    ) -> InviteService:
        """Provide invite domain service."""
        return InviteService(invite_repository, portal_client)

    @provide
    def get_share_link_service(
        self, share_link_repository: ShareLinkRepository, settings: Settings
    ) -> ShareLinkService:
        """Provide share link domain service."""
        return ShareLinkService(share_link_repository, settings.share.token_bytes)

    @provide
    def get_payment_service(
        self, payment_repository: PaymentRepository, payment_gateway: PaymentGateway
    ) -> PaymentService:
        """Provide payment domain service."""
        return PaymentService(payment_repository, payment_gateway)

    @provide
    def get_media_server_service(
        self, media_server_client: MediaServerClient
    ) -> MediaServerService:
        """Provide media-server domain service."""
        return MediaServerService(media_server_client)

    @provide
    def get_notification_service(self, mailer: Mailer) -> NotificationService:
        """Provide donor email service."""
        return NotificationService(mailer)

    @provide
    def get_event_service(self, event_repository: EventRepository) -> EventService:
        """Provide audit log service."""
        return EventService(event_repository)

    @provide
    def get_password_service(self, settings: Settings) -> PasswordService:
        """Provide password hashing service."""
        return PasswordService(settings.security.password_iterations)

    @provide
    def get_admin_session_service(
        self, session_repository: SessionRepository, settings: Settings
    ) -> AdminSessionService:
        """Provide admin session service."""
        return AdminSessionService(
            session_repository,
            settings.admin.password,
            ttl_hours=settings.admin.session_ttl_hours,
        )

    @provide
    def get_donor_session_service(
        self, session_repository: SessionRepository, settings: Settings
    ) -> DonorSessionService:
        """Provide donor dashboard session service."""
        return DonorSessionService(
            session_repository, ttl_hours=settings.customer.session_ttl_hours
        )
