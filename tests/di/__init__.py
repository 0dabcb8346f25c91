"""Mock providers for testing."""

from .http import MockHttpProvider
from .mail import MockMailProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockHttpProvider",
    "MockMailProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
