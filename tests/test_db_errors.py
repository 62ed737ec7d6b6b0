"""Tests for store error classification and translation."""

from __future__ import annotations

import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from rate_my_decision.core.errors import (
    SCHEMA_MISMATCH_MESSAGE,
    ConflictError,
    NotFoundError,
    SchemaMismatchError,
    StoreError,
)
from rate_my_decision.db.errors import ErrorKind, classify, translate


class FakePsycopgError(Exception):
    def __init__(self, sqlstate: str) -> None:
        super().__init__(f"driver failure {sqlstate}")
        self.sqlstate = sqlstate


class FakePsycopg2Error(Exception):
    def __init__(self, pgcode: str) -> None:
        super().__init__(f"driver failure {pgcode}")
        self.pgcode = pgcode


def wrap(orig: BaseException, cls=IntegrityError):
    return cls("INSERT INTO decisions ...", {}, orig)


@pytest.mark.parametrize(
    ("code", "kind"),
    [
        ("23505", ErrorKind.UNIQUE_VIOLATION),
        ("23503", ErrorKind.FOREIGN_KEY_VIOLATION),
        ("42703", ErrorKind.UNDEFINED_COLUMN),
        ("40001", ErrorKind.OTHER),
    ],
)
def test_postgres_sqlstate_classification(code: str, kind: ErrorKind) -> None:
    assert classify(wrap(FakePsycopgError(code))) is kind
    assert classify(wrap(FakePsycopg2Error(code))) is kind


@pytest.mark.parametrize(
    ("message", "kind"),
    [
        ("UNIQUE constraint failed: decisions.slug", ErrorKind.UNIQUE_VIOLATION),
        ("FOREIGN KEY constraint failed", ErrorKind.FOREIGN_KEY_VIOLATION),
        ("no such column: responses.emoji", ErrorKind.UNDEFINED_COLUMN),
        ("table responses has no column named emoji", ErrorKind.UNDEFINED_COLUMN),
        ("database is locked", ErrorKind.OTHER),
    ],
)
def test_sqlite_message_classification(message: str, kind: ErrorKind) -> None:
    assert classify(wrap(sqlite3.IntegrityError(message))) is kind


def test_unknown_errors_are_other() -> None:
    assert classify(RuntimeError("boom")) is ErrorKind.OTHER


def test_translate_unique_to_conflict() -> None:
    error = translate(
        wrap(sqlite3.IntegrityError("UNIQUE constraint failed: responses.decision_id")),
        "failed to create response",
        unique_message="viewer already submitted a response for this decision",
    )
    assert isinstance(error, ConflictError)
    assert error.status_code == 409
    assert error.message == "viewer already submitted a response for this decision"


def test_translate_foreign_key_to_not_found() -> None:
    error = translate(
        wrap(FakePsycopgError("23503")),
        "failed to toggle vote",
        foreign_key_message="decision not found",
    )
    assert isinstance(error, NotFoundError)
    assert error.message == "decision not found"


def test_translate_undefined_column_to_schema_mismatch() -> None:
    error = translate(wrap(FakePsycopgError("42703"), ProgrammingError), "failed to load decision")
    assert isinstance(error, SchemaMismatchError)
    assert error.message == SCHEMA_MISMATCH_MESSAGE


def test_translate_hides_driver_text() -> None:
    error = translate(
        wrap(sqlite3.OperationalError("disk I/O error at /var/db"), OperationalError),
        "failed to create decision",
    )
    assert isinstance(error, StoreError)
    assert error.status_code == 500
    assert error.message == "failed to create decision"


def test_unique_without_conflict_message_is_store_error() -> None:
    error = translate(wrap(FakePsycopgError("23505")), "failed to create decision")
    assert isinstance(error, StoreError)
