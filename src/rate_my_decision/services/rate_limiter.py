"""In-memory fixed-window rate limiting.

Counters live in process memory: they reset on restart and are not shared
between server processes. Each limiter instance owns its own lock.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

__all__ = ["FixedWindowLimiter", "RateDecision", "IP_KEY_PREFIX", "VIEWER_KEY_PREFIX"]

IP_KEY_PREFIX = "ip:"
VIEWER_KEY_PREFIX = "viewer:"


@dataclass(frozen=True)
class RateDecision:
    """Outcome of a single limiter check."""

    allowed: bool
    retry_after: float = 0.0

    @property
    def retry_after_seconds(self) -> int:
        """Whole seconds until the window resets; at least 1 when rejected."""
        if self.allowed:
            return 0
        return max(1, math.ceil(self.retry_after))


@dataclass
class _Bucket:
    count: int
    reset_at: float


class FixedWindowLimiter:
    """Allow at most ``limit`` hits per key in each ``window`` seconds.

    Args:
        limit: Requests allowed per window; ``<= 0`` disables limiting.
        window: Window length in seconds.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        limit: int,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def allow(self, key: str, now: float | None = None) -> RateDecision:
        """Count one hit for ``key`` and report whether it is within the limit."""
        if self.limit <= 0:
            return RateDecision(allowed=True)
        if not key:
            key = "unknown"
        if now is None:
            now = self._clock()

        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)

            bucket = self._buckets.get(key)
            if bucket is None or now >= bucket.reset_at:
                bucket = _Bucket(count=0, reset_at=now + self.window)
                self._buckets[key] = bucket

            if bucket.count >= self.limit:
                return RateDecision(allowed=False, retry_after=bucket.reset_at - now)

            bucket.count += 1
            return RateDecision(allowed=True)

    def _sweep(self, now: float) -> None:
        expired = [key for key, bucket in self._buckets.items() if now >= bucket.reset_at]
        for key in expired:
            del self._buckets[key]
        self._last_sweep = now

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
