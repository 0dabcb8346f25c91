"""Process-local sliding-window rate limiting."""

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    limit: int
    window_seconds: int


class InMemoryRateLimiter:
    """Counts hits per key over a sliding window.

    Counts live in this process only. Several workers each enforce the limit
    on their own share of the traffic.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}

    def allow(self, key: str, policy: RateLimitPolicy) -> bool:
        """Record a hit for ``key`` unless the window is already full.

        Returns:
            False when ``policy.limit`` hits already fall inside the window
        """
        now = self._clock()
        window_start = now - policy.window_seconds

        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= policy.limit:
            return False

        hits.append(now)
        return True
