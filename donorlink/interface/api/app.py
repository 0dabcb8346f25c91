"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI

from donorlink.interface.api.routes import (
    admin,
    announcements,
    customer,
    health,
    share,
    webhook,
)
from donorlink.interface.error import register_error_handlers
from donorlink.util.di.container import create_container, setup_di
from donorlink.util.observability import instrument_fastapi, instrument_httpx


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        container: DI container; the production container when omitted

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    """
    # Outbound provider calls (Logfire must be configured first)
    instrument_httpx()

    app_instance = FastAPI(
        title="DonorLink API",
        description="Subscription-gated access to a personal media server",
        version="0.1.0",
    )

    instrument_fastapi(app_instance)

    container = container or create_container()
    setup_di(app_instance, container)

    register_error_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(announcements.router)
    app_instance.include_router(share.router)
    app_instance.include_router(webhook.router)
    app_instance.include_router(admin.router)
    app_instance.include_router(admin.protected)
    app_instance.include_router(customer.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
app = create_app()
