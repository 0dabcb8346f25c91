"""Base classes for dependency injection providers.

Providers are grouped by layer. Infrastructure that leaves the process is a
*component*: its base provider has one production and one mock subclass, and
a test container chooses per component which one to use.
"""

from typing import ClassVar, Literal, get_args

from dishka import Provider

# PostgreSQL repositories, the outbound provider transport, the SMTP mailer
Component = Literal["persistence", "http", "mail"]

COMPONENTS: tuple[Component, ...] = get_args(Component)


class ProviderBase(Provider):
    """Base for every DonorLink provider.

    Config, domain, application and adapter providers leave both markers at
    their defaults. A component's base provider sets ``__mock_component__``
    and its subclasses set ``__is_mock__``.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
