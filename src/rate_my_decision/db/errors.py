"""Classification of store failures into driver-independent kinds.

Call sites only ever see :class:`ErrorKind` and the taxonomy in
``rate_my_decision.core.errors``; SQLSTATE codes and SQLite message formats
stay in this module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from rate_my_decision.core.errors import (
    ConflictError,
    DecisionServiceError,
    NotFoundError,
    SchemaMismatchError,
    StoreError,
)

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Store failure kinds the service reacts to specifically."""

    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    UNDEFINED_COLUMN = "undefined_column"
    OTHER = "other"


_POSTGRES_CODES: dict[str, ErrorKind] = {
    "23505": ErrorKind.UNIQUE_VIOLATION,
    "23503": ErrorKind.FOREIGN_KEY_VIOLATION,
    "42703": ErrorKind.UNDEFINED_COLUMN,
}

_SQLITE_MESSAGES: tuple[tuple[str, ErrorKind], ...] = (
    ("unique constraint failed", ErrorKind.UNIQUE_VIOLATION),
    ("foreign key constraint failed", ErrorKind.FOREIGN_KEY_VIOLATION),
    ("no such column", ErrorKind.UNDEFINED_COLUMN),
    ("has no column named", ErrorKind.UNDEFINED_COLUMN),
)


def _classify_postgres(orig: BaseException) -> ErrorKind | None:
    # psycopg 3 exposes ``sqlstate``; psycopg2 exposes ``pgcode``.
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if not code:
        return None
    return _POSTGRES_CODES.get(str(code), ErrorKind.OTHER)


def _classify_sqlite(orig: BaseException) -> ErrorKind | None:
    if not type(orig).__module__.startswith("sqlite3"):
        return None
    message = str(orig).lower()
    for fragment, kind in _SQLITE_MESSAGES:
        if fragment in message:
            return kind
    return ErrorKind.OTHER


_CLASSIFIERS: tuple[Callable[[BaseException], ErrorKind | None], ...] = (
    _classify_postgres,
    _classify_sqlite,
)


def classify(error: BaseException) -> ErrorKind:
    """Return the kind of a store failure, unwrapping SQLAlchemy's DBAPI wrapper."""
    orig = error.orig if isinstance(error, DBAPIError) and error.orig is not None else error
    for classifier in _CLASSIFIERS:
        kind = classifier(orig)
        if kind is not None:
            return kind
    return ErrorKind.OTHER


def translate(
    error: SQLAlchemyError,
    message: str,
    *,
    unique_message: str | None = None,
    foreign_key_message: str | None = None,
) -> DecisionServiceError:
    """Map a store failure onto the service error taxonomy.

    Args:
        error: The SQLAlchemy exception raised by the store.
        message: Generic message used for unexpected failures.
        unique_message: Conflict message when a unique constraint was violated.
        foreign_key_message: Not-found message when a referenced row is missing.

    Returns:
        The exception to raise; driver text is never part of its message.
    """
    kind = classify(error)
    if kind is ErrorKind.UNIQUE_VIOLATION and unique_message is not None:
        return ConflictError(unique_message)
    if kind is ErrorKind.FOREIGN_KEY_VIOLATION and foreign_key_message is not None:
        return NotFoundError(foreign_key_message)
    if kind is ErrorKind.UNDEFINED_COLUMN:
        logger.error("Store schema mismatch: %s", error)
        return SchemaMismatchError()
    logger.error("Store failure (%s): %s", kind.value, message, exc_info=error)
    return StoreError(message)
