#!/usr/bin/env python3
"""Start the API server with startup failures reported to Logfire."""

import sys

import logfire
import uvicorn

from donorlink.config import Settings
from donorlink.util.logging import setup_logging
from donorlink.util.observability import configure_logfire


def main() -> int:
    """Configure telemetry, then hand the process to uvicorn."""
    settings = Settings()

    setup_logging(settings)
    configure_logfire(settings)

    try:
        logfire.info(
            "Starting DonorLink API",
            host=settings.host,
            port=settings.port,
            environment=settings.environment,
        )

        # Importing the app builds the production container
        uvicorn.run(
            "donorlink.interface.api.app:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )

        return 0

    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
