"""Per-client rate limits as route dependencies.

Each login route has its own bucket. ``api_rate_limit`` covers the anonymous
share and donor routes. Clients are told apart by address. Behind a proxy,
run uvicorn with ``--proxy-headers`` so the address is the caller's.
"""

from collections.abc import Awaitable, Callable

import logfire
from fastapi import Request

from donorlink.config import RateLimitSettings, Settings
from donorlink.interface.error import RateLimitedError
from donorlink.util.rate_limit import InMemoryRateLimiter, RateLimitPolicy


def client_address(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return "unknown"


def rate_limit(
    bucket: str,
    policy: Callable[[RateLimitSettings], RateLimitPolicy],
    message: str,
) -> Callable[[Request], Awaitable[None]]:
    """Build a dependency that counts each call against ``bucket``.

    The dependency raises ``RateLimitedError`` once the client has used up
    the allowance of ``policy``.
    """

    async def enforce(request: Request) -> None:
        container = request.state.dishka_container
        settings = await container.get(Settings)
        if not settings.rate_limit.enabled:
            return

        limiter = await container.get(InMemoryRateLimiter)
        chosen = policy(settings.rate_limit)
        address = client_address(request)
        if limiter.allow(f"{bucket}:{address}", chosen):
            return

        logfire.warn(
            "Rate limit exceeded", bucket=bucket, client=address, path=request.url.path
        )
        minutes = max(1, chosen.window_seconds // 60)
        raise RateLimitedError(
            f"{message} Please try again in {minutes} minutes.",
            retry_after=chosen.window_seconds,
        )

    return enforce


def _login_policy(limits: RateLimitSettings) -> RateLimitPolicy:
    return limits.login


def _api_policy(limits: RateLimitSettings) -> RateLimitPolicy:
    return limits.api


admin_login_rate_limit = rate_limit(
    "admin-login", _login_policy, "Too many login attempts."
)
customer_login_rate_limit = rate_limit(
    "customer-login", _login_policy, "Too many login attempts."
)
api_rate_limit = rate_limit("api", _api_policy, "Too many requests.")
