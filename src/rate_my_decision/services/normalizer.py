"""Input normalization and boundary validation.

Every helper either returns the normalized value or raises
:class:`~rate_my_decision.core.errors.ValidationError` with a message that names
the offending field. Nothing here touches the database.
"""

from __future__ import annotations

import unicodedata
import uuid
from datetime import datetime, timedelta
from typing import Final

from rate_my_decision.core.emoji import rating_for_emoji
from rate_my_decision.core.errors import ValidationError
from rate_my_decision.db.time import as_utc, utcnow

TITLE_MIN_LENGTH: Final[int] = 4
TITLE_MAX_LENGTH: Final[int] = 100
DESCRIPTION_MAX_LENGTH: Final[int] = 500
COMMENT_MAX_LENGTH: Final[int] = 180
SLUG_MAX_LENGTH: Final[int] = 128
CLOSES_AT_SKEW: Final[timedelta] = timedelta(minutes=1)

SUGGESTION_DONT_DO_IT: Final[int] = 1
SUGGESTION_MIXED: Final[int] = 2
SUGGESTION_DO_IT: Final[int] = 3

_SLUG_CHARS: Final[frozenset[str]] = frozenset("abcdefghijklmnopqrstuvwxyz0123456789-")


def normalize_line_breaks(value: str) -> str:
    """Turn CRLF and lone CR into LF."""
    return value.replace("\r\n", "\n").replace("\r", "\n")


def contains_disallowed_control_chars(value: str, *, allow_newlines: bool) -> bool:
    """Return True if ``value`` holds control characters outside the allowed set."""
    for char in value:
        if unicodedata.category(char) != "Cc":
            continue
        if allow_newlines and char in ("\n", "\t"):
            continue
        return True
    return False


def normalize_required_text(
    raw: str,
    *,
    field: str,
    min_length: int,
    max_length: int,
    allow_newlines: bool = False,
) -> str:
    normalized = normalize_line_breaks(raw).strip()
    if not normalized:
        raise ValidationError(f"{field} is required")
    if contains_disallowed_control_chars(normalized, allow_newlines=allow_newlines):
        raise ValidationError(f"{field} contains unsupported control characters")
    if not min_length <= len(normalized) <= max_length:
        raise ValidationError(
            f"{field} must be between {min_length} and {max_length} characters"
        )
    return normalized


def normalize_optional_text(
    raw: str | None,
    *,
    field: str,
    max_length: int,
    allow_newlines: bool = True,
) -> str | None:
    """Normalize optional free text; empty after trimming collapses to None."""
    if raw is None:
        return None
    normalized = normalize_line_breaks(raw).strip()
    if not normalized:
        return None
    if contains_disallowed_control_chars(normalized, allow_newlines=allow_newlines):
        raise ValidationError(f"{field} contains unsupported control characters")
    if len(normalized) > max_length:
        raise ValidationError(f"{field} must be {max_length} characters or fewer")
    return normalized


def normalize_title(raw: str) -> str:
    return normalize_required_text(
        raw,
        field="title",
        min_length=TITLE_MIN_LENGTH,
        max_length=TITLE_MAX_LENGTH,
    )


def normalize_description(raw: str | None) -> str | None:
    return normalize_optional_text(raw, field="description", max_length=DESCRIPTION_MAX_LENGTH)


def normalize_comment(raw: str | None) -> str | None:
    return normalize_optional_text(raw, field="comment", max_length=COMMENT_MAX_LENGTH)


def normalize_closes_at(raw: datetime | None, now: datetime | None = None) -> datetime | None:
    """Validate a close timestamp, tolerating one minute of client clock skew.

    Naive timestamps are read as UTC. The result is always an aware UTC datetime.
    """
    if raw is None:
        return None
    closes_at = as_utc(raw)
    current = now or utcnow()
    if closes_at < current - CLOSES_AT_SKEW:
        raise ValidationError("closes_at must be in the future")
    return closes_at


def is_valid_slug(slug: str) -> bool:
    if slug.startswith("-") or slug.endswith("-"):
        return False
    return all(char in _SLUG_CHARS for char in slug)


def normalize_slug_param(raw: str) -> str:
    """Validate a slug taken from the URL path."""
    slug = raw.strip()
    if not slug:
        raise ValidationError("slug is required")
    if len(slug) > SLUG_MAX_LENGTH:
        raise ValidationError(f"slug must be {SLUG_MAX_LENGTH} characters or fewer")
    if not is_valid_slug(slug):
        raise ValidationError("slug is invalid")
    return slug


def parse_viewer_id(raw: str | None, *, field: str = "viewer_id") -> uuid.UUID:
    """Parse a client-generated viewer identifier."""
    try:
        return uuid.UUID((raw or "").strip())
    except ValueError:
        raise ValidationError(f"{field} must be a valid UUID") from None


def parse_viewer_id_query(values: list[str]) -> uuid.UUID | None:
    """Parse the optional ``viewer_id`` query parameter.

    Args:
        values: Every value supplied for the parameter, in request order.

    Returns:
        The viewer id, or None when the parameter is absent or blank.
    """
    if not values:
        return None
    if len(values) > 1:
        raise ValidationError("viewer_id query param must appear only once")
    raw = values[0].strip()
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationError("viewer_id query param must be a valid UUID") from None


def validate_query_params(keys: list[str], allowed: frozenset[str]) -> None:
    for key in keys:
        if key not in allowed:
            raise ValidationError(f"unexpected query parameter: {key}")


def normalize_emoji(raw: str) -> tuple[str, int]:
    """Return the trimmed emoji and the rating it maps to."""
    emoji = raw.strip()
    rating = rating_for_emoji(emoji)
    if rating is None:
        raise ValidationError("emoji is invalid")
    return emoji, rating


def normalize_suggestion(raw: int) -> int:
    if raw not in (SUGGESTION_DONT_DO_IT, SUGGESTION_MIXED, SUGGESTION_DO_IT):
        raise ValidationError(
            "suggestion must be 1 (don't do it), 2 (mixed), or 3 (do it)"
        )
    return raw


def normalize_vote_value(raw: int) -> int:
    if raw not in (-1, 1):
        raise ValidationError("value must be -1 or 1")
    return raw
