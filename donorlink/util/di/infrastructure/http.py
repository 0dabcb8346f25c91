"""Outbound HTTP infrastructure providers."""

from dishka import Scope, provide

from donorlink.adapter.http import HttpxTransport, Transport
from donorlink.config import Settings
from donorlink.util.di.base import ProviderBase


class HttpProvider(ProviderBase):
    """Outbound transport component base."""

    __mock_component__ = "http"


class ProdHttpProvider(HttpProvider):
    """Real network transport backed by httpx."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_transport(self, settings: Settings) -> Transport:
        """Provide outbound transport."""
        return HttpxTransport(timeout_seconds=settings.http.timeout_seconds)
