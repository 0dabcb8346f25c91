#!/usr/bin/env python3
"""Apply pending schema migrations before the server starts."""

import sys

import logfire
from alembic import command
from alembic.config import Config

from donorlink.config import Settings
from donorlink.util.observability import configure_logfire


def main() -> int:
    """Upgrade the database to the latest revision."""
    settings = Settings()

    configure_logfire(settings)

    try:
        with logfire.span("migrations.upgrade", environment=settings.environment):
            alembic_cfg = Config("alembic.ini")
            command.upgrade(alembic_cfg, "head")

        logfire.info("Database migrations completed")
        return 0

    except Exception as e:
        logfire.error(
            "Database migration failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # The server must not start against a stale schema
        raise


if __name__ == "__main__":
    sys.exit(main())
