"""Business logic services for the Rate My Decision service."""

from .rate_limiter import FixedWindowLimiter

__all__ = [
    "FixedWindowLimiter",
]
