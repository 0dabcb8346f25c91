"""Application layer DI providers."""

from dishka import Scope, provide

from donorlink.application.usecase.admin import (
    AdminLoginUseCase,
    AdminLogoutUseCase,
    CreateProspectUseCase,
    GetAdminSessionUseCase,
    GetSettingsUseCase,
    IssueSubscriberInviteUseCase,
    IssueSubscriberShareLinkUseCase,
    ListEventsUseCase,
    ListProspectsUseCase,
    ListSubscribersUseCase,
    ResendInviteEmailUseCase,
    RevokeSubscriberUseCase,
    UpdateSettingsUseCase,
    VerifySettingsUseCase,
)
from donorlink.application.usecase.announcement import GetAnnouncementsUseCase
from donorlink.application.usecase.customer import (
    CustomerLoginUseCase,
    CustomerLogoutUseCase,
    GenerateCustomerInviteUseCase,
    GetCustomerSessionUseCase,
    UpdateCustomerProfileUseCase,
)
from donorlink.application.usecase.lifecycle import (
    AccessController,
    SubscriptionEventExecutor,
)
from donorlink.application.usecase.share import (
    GenerateShareInviteUseCase,
    GetShareLinkUseCase,
    SetupShareAccountUseCase,
    StartShareCheckoutUseCase,
)
from donorlink.application.usecase.webhook import HandlePayPalWebhookUseCase
from donorlink.domain.repository import TransactionManager
from donorlink.domain.service import (
    AdminSessionService,
    DonorService,
    DonorSessionService,
    EventService,
    InviteService,
    MediaServerService,
    NotificationService,
    PasswordService,
    PaymentService,
    ProspectService,
    SettingsService,
    ShareLinkService,
)
from donorlink.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_access_controller(
        self,
        settings_service: SettingsService,
        invite_service: InviteService,
        media_server_service: MediaServerService,
        notification_service: NotificationService,
        event_service: EventService,
    ) -> AccessController:
        """Provide the shared grant/revoke workflow."""
        return AccessController(
            settings_service=settings_service,
            invite_service=invite_service,
            media_server_service=media_server_service,
            notification_service=notification_service,
            event_service=event_service,
        )

    # Webhook
    @provide(scope=Scope.REQUEST)
    def get_handle_paypal_webhook_use_case(
        self,
        donor_service: DonorService,
        payment_service: PaymentService,
        settings_service: SettingsService,
        event_service: EventService,
        access_controller: AccessController,
        executor: SubscriptionEventExecutor,
        transaction: TransactionManager,
    ) -> HandlePayPalWebhookUseCase:
        """Provide PayPal webhook use case."""
        return HandlePayPalWebhookUseCase(
            donor_service=donor_service,
            payment_service=payment_service,
            settings_service=settings_service,
            event_service=event_service,
            access_controller=access_controller,
            executor=executor,
            transaction=transaction,
        )

    # Share links
    @provide(scope=Scope.REQUEST)
    def get_share_link_use_case(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        invite_service: InviteService,
        settings_service: SettingsService,
    ) -> GetShareLinkUseCase:
        """Provide get share link use case."""
        return GetShareLinkUseCase(
            share_link_service=share_link_service,
            donor_service=donor_service,
            prospect_service=prospect_service,
            invite_service=invite_service,
            settings_service=settings_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_generate_share_invite_use_case(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        settings_service: SettingsService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> GenerateShareInviteUseCase:
        """Provide generate share invite use case."""
        return GenerateShareInviteUseCase(
            share_link_service=share_link_service,
            donor_service=donor_service,
            prospect_service=prospect_service,
            settings_service=settings_service,
            event_service=event_service,
            access_controller=access_controller,
        )

    @provide(scope=Scope.REQUEST)
    def get_setup_share_account_use_case(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        invite_service: InviteService,
        password_service: PasswordService,
        settings_service: SettingsService,
        event_service: EventService,
        transaction: TransactionManager,
    ) -> SetupShareAccountUseCase:
        """Provide share account setup use case."""
        return SetupShareAccountUseCase(
            share_link_service=share_link_service,
            donor_service=donor_service,
            prospect_service=prospect_service,
            invite_service=invite_service,
            password_service=password_service,
            settings_service=settings_service,
            event_service=event_service,
            transaction=transaction,
        )

    @provide(scope=Scope.REQUEST)
    def get_start_share_checkout_use_case(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        payment_service: PaymentService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> StartShareCheckoutUseCase:
        """Provide share checkout use case."""
        return StartShareCheckoutUseCase(
            share_link_service=share_link_service,
            donor_service=donor_service,
            prospect_service=prospect_service,
            payment_service=payment_service,
            settings_service=settings_service,
            event_service=event_service,
        )

    # Announcements
    @provide(scope=Scope.REQUEST)
    def get_announcements_use_case(
        self, settings_service: SettingsService
    ) -> GetAnnouncementsUseCase:
        """Provide announcement banner use case."""
        return GetAnnouncementsUseCase(settings_service=settings_service)

    # Donor self-service
    @provide(scope=Scope.REQUEST)
    def get_customer_login_use_case(
        self,
        donor_service: DonorService,
        password_service: PasswordService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
    ) -> CustomerLoginUseCase:
        """Provide donor login use case."""
        return CustomerLoginUseCase(
            donor_service=donor_service,
            password_service=password_service,
            donor_session_service=donor_session_service,
            invite_service=invite_service,
            settings_service=settings_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_customer_logout_use_case(
        self, donor_session_service: DonorSessionService
    ) -> CustomerLogoutUseCase:
        """Provide donor logout use case."""
        return CustomerLogoutUseCase(donor_session_service=donor_session_service)

    @provide(scope=Scope.REQUEST)
    def get_customer_session_use_case(
        self,
        donor_service: DonorService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
    ) -> GetCustomerSessionUseCase:
        """Provide donor dashboard session use case."""
        return GetCustomerSessionUseCase(
            donor_service=donor_service,
            donor_session_service=donor_session_service,
            invite_service=invite_service,
            settings_service=settings_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_update_customer_profile_use_case(
        self,
        donor_service: DonorService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> UpdateCustomerProfileUseCase:
        """Provide donor profile update use case."""
        return UpdateCustomerProfileUseCase(
            donor_service=donor_service,
            donor_session_service=donor_session_service,
            invite_service=invite_service,
            settings_service=settings_service,
            event_service=event_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_generate_customer_invite_use_case(
        self,
        donor_service: DonorService,
        donor_session_service: DonorSessionService,
        invite_service: InviteService,
        settings_service: SettingsService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> GenerateCustomerInviteUseCase:
        """Provide donor invite use case."""
        return GenerateCustomerInviteUseCase(
            donor_service=donor_service,
            donor_session_service=donor_session_service,
            invite_service=invite_service,
            settings_service=settings_service,
            event_service=event_service,
            access_controller=access_controller,
        )

    # Admin session
    @provide(scope=Scope.REQUEST)
    def get_admin_login_use_case(
        self, admin_session_service: AdminSessionService
    ) -> AdminLoginUseCase:
        """Provide admin login use case."""
        return AdminLoginUseCase(admin_session_service=admin_session_service)

    @provide(scope=Scope.REQUEST)
    def get_admin_logout_use_case(
        self, admin_session_service: AdminSessionService
    ) -> AdminLogoutUseCase:
        """Provide admin logout use case."""
        return AdminLogoutUseCase(admin_session_service=admin_session_service)

    @provide(scope=Scope.REQUEST)
    def get_admin_session_use_case(
        self, admin_session_service: AdminSessionService
    ) -> GetAdminSessionUseCase:
        """Provide admin session check use case."""
        return GetAdminSessionUseCase(admin_session_service=admin_session_service)

    # Admin subscribers
    @provide(scope=Scope.REQUEST)
    def get_list_subscribers_use_case(
        self,
        donor_service: DonorService,
        invite_service: InviteService,
        payment_service: PaymentService,
        share_link_service: ShareLinkService,
        settings_service: SettingsService,
    ) -> ListSubscribersUseCase:
        """Provide list subscribers use case."""
        return ListSubscribersUseCase(
            donor_service=donor_service,
            invite_service=invite_service,
            payment_service=payment_service,
            share_link_service=share_link_service,
            settings_service=settings_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_issue_subscriber_invite_use_case(
        self,
        donor_service: DonorService,
        settings_service: SettingsService,
        notification_service: NotificationService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> IssueSubscriberInviteUseCase:
        """Provide admin invite use case."""
        return IssueSubscriberInviteUseCase(
            donor_service=donor_service,
            settings_service=settings_service,
            notification_service=notification_service,
            event_service=event_service,
            access_controller=access_controller,
        )

    @provide(scope=Scope.REQUEST)
    def get_resend_invite_email_use_case(
        self,
        donor_service: DonorService,
        invite_service: InviteService,
        settings_service: SettingsService,
        notification_service: NotificationService,
        event_service: EventService,
    ) -> ResendInviteEmailUseCase:
        """Provide resend invite email use case."""
        return ResendInviteEmailUseCase(
            donor_service=donor_service,
            invite_service=invite_service,
            settings_service=settings_service,
            notification_service=notification_service,
            event_service=event_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_issue_subscriber_share_link_use_case(
        self,
        donor_service: DonorService,
        share_link_service: ShareLinkService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> IssueSubscriberShareLinkUseCase:
        """Provide subscriber share link use case."""
        return IssueSubscriberShareLinkUseCase(
            donor_service=donor_service,
            share_link_service=share_link_service,
            settings_service=settings_service,
            event_service=event_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_revoke_subscriber_use_case(
        self,
        donor_service: DonorService,
        event_service: EventService,
        access_controller: AccessController,
    ) -> RevokeSubscriberUseCase:
        """Provide subscriber revocation use case."""
        return RevokeSubscriberUseCase(
            donor_service=donor_service,
            event_service=event_service,
            access_controller=access_controller,
        )

    # Admin prospects
    @provide(scope=Scope.REQUEST)
    def get_list_prospects_use_case(
        self, prospect_service: ProspectService
    ) -> ListProspectsUseCase:
        """Provide list prospects use case."""
        return ListProspectsUseCase(prospect_service=prospect_service)

    @provide(scope=Scope.REQUEST)
    def get_create_prospect_use_case(
        self,
        prospect_service: ProspectService,
        share_link_service: ShareLinkService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> CreateProspectUseCase:
        """Provide create prospect use case."""
        return CreateProspectUseCase(
            prospect_service=prospect_service,
            share_link_service=share_link_service,
            settings_service=settings_service,
            event_service=event_service,
        )

    # Admin events and settings
    @provide(scope=Scope.REQUEST)
    def get_list_events_use_case(
        self, event_service: EventService
    ) -> ListEventsUseCase:
        """Provide audit log use case."""
        return ListEventsUseCase(event_service=event_service)

    @provide(scope=Scope.REQUEST)
    def get_read_settings_use_case(
        self, settings_service: SettingsService
    ) -> GetSettingsUseCase:
        """Provide settings read use case."""
        return GetSettingsUseCase(settings_service=settings_service)

    @provide(scope=Scope.REQUEST)
    def get_update_settings_use_case(
        self, settings_service: SettingsService, event_service: EventService
    ) -> UpdateSettingsUseCase:
        """Provide settings update use case."""
        return UpdateSettingsUseCase(
            settings_service=settings_service, event_service=event_service
        )

    @provide(scope=Scope.REQUEST)
    def get_verify_settings_use_case(
        self,
        settings_service: SettingsService,
        payment_service: PaymentService,
        invite_service: InviteService,
        media_server_service: MediaServerService,
        notification_service: NotificationService,
    ) -> VerifySettingsUseCase:
        """Provide connection test use case."""
        return VerifySettingsUseCase(
            settings_service=settings_service,
            payment_service=payment_service,
            invite_service=invite_service,
            media_server_service=media_server_service,
            notification_service=notification_service,
        )
