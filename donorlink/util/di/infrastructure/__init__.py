"""Infrastructure providers."""

# Import bases
from .http import HttpProvider
from .mail import MailProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .http import ProdHttpProvider  # noqa: F401
from .mail import ProdMailProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "HttpProvider",
    "MailProvider",
    "PersistenceProvider",
    "ProdHttpProvider",
    "ProdMailProvider",
    "ProdPersistenceProvider",
]
