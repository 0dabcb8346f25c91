"""Dependency injection container."""

from dishka import AsyncContainer, Provider, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from donorlink.util.di import PROVIDERS, get_provider


def production_providers() -> list[Provider]:
    """One production instance of every provider in ``PROVIDERS``."""
    return [get_provider(base, use_mock=False)() for base in PROVIDERS]


def create_container(*extra: Provider) -> AsyncContainer:
    """Build the production container.

    ``FastapiProvider`` is always included so routes and dependencies can
    receive the ``Request``. Settings are read from the environment the
    first time they are resolved.
    """
    return make_async_container(*production_providers(), FastapiProvider(), *extra)


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach ``container`` to ``app``. Each request opens its own REQUEST scope."""
    setup_dishka(container, app)
