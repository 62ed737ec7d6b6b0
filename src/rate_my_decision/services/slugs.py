"""Slug generation and collision-safe decision creation."""

from __future__ import annotations

import logging
import secrets
import string
import unicodedata
import uuid
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rate_my_decision.core.errors import ConflictError
from rate_my_decision.db.errors import ErrorKind, classify, translate
from rate_my_decision.models import Decision
from rate_my_decision.services.normalizer import SLUG_MAX_LENGTH

logger = logging.getLogger(__name__)

SLUG_FALLBACK_BASE = "decision"
SLUG_SUFFIX_LENGTH = 5
SLUG_MAX_ATTEMPTS = 8
SLUG_BASE_MAX_LENGTH = SLUG_MAX_LENGTH - SLUG_SUFFIX_LENGTH - 1
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SLUG_BODY_CHARS = frozenset(SUFFIX_ALPHABET)

__all__ = [
    "SLUG_BASE_MAX_LENGTH",
    "SLUG_FALLBACK_BASE",
    "SLUG_MAX_ATTEMPTS",
    "SLUG_SUFFIX_LENGTH",
    "create_decision",
    "random_suffix",
    "slugify",
]


def slugify(title: str) -> str:
    """Reduce a title to lowercase ASCII letters, digits and single hyphens.

    Accented letters are folded to their base letter (``café`` → ``cafe``).
    Runs of whitespace, hyphens and underscores become one hyphen; any other
    character is dropped. The result never starts or ends with a hyphen.
    """
    folded = unicodedata.normalize("NFKD", title.strip().lower())
    parts: list[str] = []
    last_hyphen = False
    for char in folded:
        if char in _SLUG_BODY_CHARS:
            parts.append(char)
            last_hyphen = False
        elif (char.isspace() or char in "-_") and not last_hyphen and parts:
            parts.append("-")
            last_hyphen = True
    return "".join(parts).strip("-")


def random_suffix(length: int = SLUG_SUFFIX_LENGTH) -> str:
    """Return a cryptographically random lowercase alphanumeric suffix."""
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def create_decision(
    db: Session,
    *,
    title: str,
    description: str | None,
    closes_at: datetime | None,
    suffix_factory: Callable[[], str] = random_suffix,
    max_attempts: int = SLUG_MAX_ATTEMPTS,
) -> Decision:
    """Insert a decision under a fresh slug, retrying on slug collisions.

    Args:
        db: Session used for the insert; each attempt is its own transaction.
        title: Normalized title the slug is derived from.
        description: Normalized optional description.
        closes_at: Normalized optional close timestamp (UTC).
        suffix_factory: Source of slug suffixes.
        max_attempts: Upper bound on insert attempts.

    Returns:
        The persisted decision.

    Raises:
        ConflictError: If every attempt collided with an existing slug.
        StoreError: If the store fails for any other reason.
    """
    # Folding can expand one character into several, so bound the base
    # to keep base + "-" + suffix within the slug column.
    base = slugify(title)[:SLUG_BASE_MAX_LENGTH].rstrip("-") or SLUG_FALLBACK_BASE
    decision_id = uuid.uuid4()

    for attempt in range(1, max_attempts + 1):
        slug = f"{base}-{suffix_factory()}"
        decision = Decision(
            id=decision_id,
            slug=slug,
            title=title,
            description=description,
            closes_at=closes_at,
        )
        db.add(decision)
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            if classify(exc) is ErrorKind.UNIQUE_VIOLATION:
                logger.info("Slug collision on %s (attempt %d/%d)", slug, attempt, max_attempts)
                continue
            raise translate(exc, "failed to create decision") from exc

        logger.info("Created decision %s with slug %s after %d attempt(s)", decision.id, slug, attempt)
        return decision

    raise ConflictError("failed to generate a unique slug")
