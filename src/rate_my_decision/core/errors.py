"""Error taxonomy shared by the service and API layers.

Every error carries the HTTP status it is rendered with, so the exception
handlers registered by the application factory stay a single lookup.
"""

from __future__ import annotations

SCHEMA_MISMATCH_MESSAGE = "database schema is out of date. Run migrations and restart the server"


class DecisionServiceError(RuntimeError):
    """Base exception for all failures reported to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DecisionServiceError):
    """Raised for malformed or out-of-range input; the message names the field."""

    status_code = 400


class AuthError(DecisionServiceError):
    """Raised when a write route is called without a valid API key."""

    status_code = 401


class NotFoundError(DecisionServiceError):
    """Raised for unknown decision slugs or response identifiers."""

    status_code = 404


class ConflictError(DecisionServiceError):
    """Raised for duplicate responses, closed decisions and slug exhaustion."""

    status_code = 409


class RateLimitError(DecisionServiceError):
    """Raised when a fixed-window limiter rejects a request."""

    status_code = 429

    def __init__(self, retry_after_seconds: int, message: str = "rate limit exceeded") -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class SchemaMismatchError(DecisionServiceError):
    """Raised when the store lacks an expected column (migrations not applied)."""

    status_code = 500

    def __init__(self, message: str = SCHEMA_MISMATCH_MESSAGE) -> None:
        super().__init__(message)


class StoreError(DecisionServiceError):
    """Raised for unexpected store failures; the message stays generic."""

    status_code = 500
