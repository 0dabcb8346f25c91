"""Errors raised while the process is being assembled.

They stop startup (unusable settings) or container wiring and never reach an
HTTP caller.
"""


class UtilError(Exception):
    """Base for startup and wiring errors."""


class ConfigurationError(UtilError):
    """Settings loaded from the environment are unusable.

    Production refuses to start with the default admin password, for example.
    """


class DependencyInjectionError(UtilError):
    """No provider implementation matches a component request."""

    def __init__(self, message: str, component: str | None = None) -> None:
        super().__init__(message)
        self.component = component
