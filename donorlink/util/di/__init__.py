"""Dependency injection module."""

from typing import Type

from donorlink.util.di.adapter import ProdAdapterProvider
from donorlink.util.di.application import ProdApplicationProvider
from donorlink.util.di.base import Component, ProviderBase
from donorlink.util.di.core import ProdConfigProvider
from donorlink.util.di.domain import ProdDomainProvider
from donorlink.util.di.infrastructure import (
    HttpProvider,
    MailProvider,
    PersistenceProvider,
    ProdHttpProvider,
    ProdMailProvider,
    ProdPersistenceProvider,
)
from donorlink.util.error import DependencyInjectionError

# Single list - all providers treated uniformly
PROVIDERS: list[Type[ProviderBase]] = [
    # Core providers (not mockable)
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    ProdAdapterProvider,
    # Infrastructure components (mockable)
    PersistenceProvider,
    HttpProvider,
    MailProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Get appropriate provider class.

    - No subclasses: concrete provider, used directly
    - Has subclasses: mockable component, selected by ``__is_mock__``

    Args:
        base: Provider base class
        use_mock: Whether to use mock implementation

    Returns:
        Provider class (not instantiated)

    Raises:
        DependencyInjectionError: If requested implementation not found
    """
    subclasses = base.__subclasses__()

    if not subclasses:
        return base

    impl = next(
        (c for c in subclasses if getattr(c, "__is_mock__", False) == use_mock),
        None,
    )

    if not impl:
        kind = "mock" if use_mock else "production"
        component_name = getattr(base, "__mock_component__", base.__name__)
        raise DependencyInjectionError(
            f"No {kind} implementation for {component_name}",
            component=component_name,
        )

    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdAdapterProvider",
    "ProdApplicationProvider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    # Infrastructure base classes
    "HttpProvider",
    "MailProvider",
    "PersistenceProvider",
    # Infrastructure implementations
    "ProdHttpProvider",
    "ProdMailProvider",
    "ProdPersistenceProvider",
]
