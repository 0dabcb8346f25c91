"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from donorlink.config import Settings
from donorlink.util.di.base import ProviderBase
from donorlink.util.rate_limit import InMemoryRateLimiter


class ProdConfigProvider(ProviderBase):
    """Settings loaded from the environment and ``.env``."""

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_rate_limiter(self) -> InMemoryRateLimiter:
        """Provide the process-wide request counter."""
        return InMemoryRateLimiter()
