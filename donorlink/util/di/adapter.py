"""Provider adapter DI providers.

Adapters hold no per-request state, so they live for the whole process.
The outbound transport they share comes from the mockable ``http``
component.
"""

from dishka import Scope, provide

from donorlink.adapter.http import Transport
from donorlink.adapter.mediaserver import MediaServerCache, PlexClient
from donorlink.adapter.paypal import PayPalClient
from donorlink.adapter.portal import HttpPortalClient
from donorlink.application.usecase.lifecycle import SubscriptionEventExecutor
from donorlink.config import Settings
from donorlink.domain.service import MediaServerClient, PaymentGateway, PortalClient
from donorlink.util.di.base import ProviderBase


class ProdAdapterProvider(ProviderBase):
    """Provider clients and process-wide state."""

    scope = Scope.APP

    @provide
    def get_media_server_cache(self) -> MediaServerCache:
        """Provide the media-server discovery cache."""
        return MediaServerCache()

    @provide
    def get_portal_client(
        self, transport: Transport, settings: Settings
    ) -> PortalClient:
        """Provide the invite-portal client."""
        return HttpPortalClient(transport, timeout=settings.http.timeout_seconds)

    @provide
    def get_media_server_client(
        self, transport: Transport, cache: MediaServerCache, settings: Settings
    ) -> MediaServerClient:
        """Provide the Plex client."""
        return PlexClient(transport, cache, timeout=settings.http.timeout_seconds)

    @provide
    def get_payment_gateway(
        self, transport: Transport, settings: Settings
    ) -> PaymentGateway:
        """Provide the PayPal client."""
        return PayPalClient(transport, timeout=settings.http.timeout_seconds)

    @provide
    def get_subscription_executor(self) -> SubscriptionEventExecutor:
        """Provide the per-subscription webhook serializer."""
        return SubscriptionEventExecutor()
