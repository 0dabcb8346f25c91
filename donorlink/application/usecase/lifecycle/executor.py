"""Per-subscription serial execution of webhook handlers."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import logfire

T = TypeVar("T")


class SubscriptionEventExecutor:
    """Runs handlers for the same key one at a time.

    One ``asyncio.Lock`` exists per key while work for that key is pending;
    handlers for different keys run concurrently. Locks are dropped once
    their last waiter finishes.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def pending(self, key: str) -> int:
        """Number of handlers running or queued for ``key``."""
        return self._waiters.get(key, 0)

    async def run(self, key: str | None, handler: Callable[[], Awaitable[T]]) -> T:
        """Run ``handler`` after every earlier handler for ``key`` finished.

        A missing key means the event cannot be attributed to a
        subscription; such handlers run without ordering.
        """
        if not key:
            return await handler()

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            if lock.locked():
                logfire.info("Waiting for earlier subscription event", key=key)
            async with lock:
                return await handler()
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]
