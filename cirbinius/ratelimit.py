"""Per-key sliding-window request limiting."""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from typing import Callable

_MINUTE = 60.0
_HOUR = 3600.0


class RateLimitExceeded(Exception):
    """Raised when a key has used up its request allowance."""


class RateLimiter:
    """Limits requests per key within a one-minute and a one-hour window."""

    def __init__(
        self,
        max_per_minute: int,
        max_per_hour: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_per_minute = max_per_minute
        self.max_per_hour = max_per_hour
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: dict[str, list[float]] = defaultdict(list)

    def check(self, key: str) -> None:
        """Record a request for key, raising RateLimitExceeded if over a limit."""
        now = self._clock()
        with self._lock:
            recent = [t for t in self._requests[key] if now - t < _MINUTE]
            self._requests[key] = recent
            if len(recent) >= self.max_per_minute:
                raise RateLimitExceeded("rate limit exceeded: per minute")
            hour_ago = now - _HOUR
            if sum(1 for t in recent if t > hour_ago) >= self.max_per_hour:
                raise RateLimitExceeded("rate limit exceeded: per hour")
            recent.append(now)