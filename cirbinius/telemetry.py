"""Minimal request counting and timing diagnostics written to stderr."""

from __future__ import annotations

import sys
import threading
import time
from typing import Callable

_PREFIX = "cirbinius-api"
_SLOW_MS = 100

_lock = threading.Lock()
_request_count = 0
_initialized_at: float | None = None


def init_telemetry() -> None:
    """Mark telemetry as active and announce it on stderr."""
    global _initialized_at
    with _lock:
        _initialized_at = time.monotonic()
    print(f"{_PREFIX}: telemetry initialized (minimal mode)", file=sys.stderr)


def startup_msg(msg: str) -> None:
    """Write a service message to stderr."""
    print(f"{_PREFIX}: {msg}", file=sys.stderr)


def record_request() -> None:
    """Count one handled request."""
    global _request_count
    with _lock:
        _request_count += 1


def request_count() -> int:
    """Return the number of requests counted so far."""
    with _lock:
        return _request_count


class TimingScope:
    """Context manager that reports blocks taking longer than 100 ms."""

    def __init__(self, name: str, clock: Callable[[], float] = time.monotonic) -> None:
        self.name = name
        self._clock = clock
        self._start = 0.0
        self.elapsed_ms = 0

    def __enter__(self) -> "TimingScope":
        self._start = self._clock()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed_ms = int((self._clock() - self._start) * 1000)
        if self.elapsed_ms > _SLOW_MS:
            print(f"{_PREFIX}: timing [{self.name}] took {self.elapsed_ms}ms", file=sys.stderr)