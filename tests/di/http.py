"""Mock outbound HTTP provider for testing."""

from dishka import Scope, provide

from donorlink.adapter.http import ScriptedTransport, Transport
from donorlink.util.di.infrastructure.http import HttpProvider


class MockHttpProvider(HttpProvider):
    """Scripted transport; tests queue provider responses on it.

    The same instance answers for ``Transport`` and ``ScriptedTransport`` so a
    test can script responses and inspect the calls adapters made.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_scripted_transport(self) -> ScriptedTransport:
        return ScriptedTransport()

    @provide(scope=Scope.APP)
    def get_transport(self, transport: ScriptedTransport) -> Transport:
        return transport
