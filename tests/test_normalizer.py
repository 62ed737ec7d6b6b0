"""Tests for input normalization helpers."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest

from rate_my_decision.core.errors import ValidationError
from rate_my_decision.services.normalizer import (
    contains_disallowed_control_chars,
    normalize_closes_at,
    normalize_comment,
    normalize_description,
    normalize_emoji,
    normalize_slug_param,
    normalize_suggestion,
    normalize_title,
    normalize_vote_value,
    parse_viewer_id,
    parse_viewer_id_query,
    validate_query_params,
)


def test_title_is_trimmed() -> None:
    assert normalize_title("  Move to Lisbon  ") == "Move to Lisbon"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("   ", "title is required"),
        ("abc", "title must be between 4 and 100 characters"),
        ("x" * 101, "title must be between 4 and 100 characters"),
        ("Move\nabroad", "title contains unsupported control characters"),
        ("Move\tabroad", "title contains unsupported control characters"),
    ],
)
def test_title_rejections(raw: str, message: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_title(raw)
    assert exc_info.value.message == message


def test_title_length_counts_code_points() -> None:
    assert normalize_title("🫠🫠🫠🫠") == "🫠🫠🫠🫠"


def test_description_normalizes_line_breaks_and_keeps_newlines() -> None:
    assert normalize_description("first\r\nsecond\rthird\n") == "first\nsecond\nthird"


def test_blank_optional_text_becomes_none() -> None:
    assert normalize_description("   \n ") is None
    assert normalize_comment("") is None
    assert normalize_comment(None) is None


def test_description_rejects_other_control_characters() -> None:
    with pytest.raises(ValidationError, match="description contains unsupported control characters"):
        normalize_description("bell\x07")


def test_optional_text_limits() -> None:
    assert normalize_description("d" * 500) == "d" * 500
    with pytest.raises(ValidationError, match="description must be 500 characters or fewer"):
        normalize_description("d" * 501)
    assert normalize_comment("c" * 180) == "c" * 180
    with pytest.raises(ValidationError, match="comment must be 180 characters or fewer"):
        normalize_comment("c" * 181)


def test_control_char_detection() -> None:
    assert contains_disallowed_control_chars("a\nb", allow_newlines=True) is False
    assert contains_disallowed_control_chars("a\nb", allow_newlines=False) is True
    assert contains_disallowed_control_chars("a\x00b", allow_newlines=True) is True


def test_closes_at_tolerates_small_skew() -> None:
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    slightly_past = now - timedelta(seconds=30)
    assert normalize_closes_at(slightly_past, now=now) == slightly_past


def test_closes_at_rejects_past() -> None:
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    with pytest.raises(ValidationError, match="closes_at"):
        normalize_closes_at(now - timedelta(minutes=5), now=now)


def test_closes_at_naive_is_read_as_utc() -> None:
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    result = normalize_closes_at(datetime(2026, 1, 2, 9, 30), now=now)
    assert result == datetime(2026, 1, 2, 9, 30, tzinfo=UTC)
    assert result.tzinfo is not None


def test_closes_at_is_converted_to_utc() -> None:
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    plus_two = timezone(timedelta(hours=2))
    result = normalize_closes_at(datetime(2026, 1, 2, 14, 0, tzinfo=plus_two), now=now)
    assert result == datetime(2026, 1, 2, 12, 0, tzinfo=UTC)
    assert result.utcoffset() == timedelta(0)


@pytest.mark.parametrize("slug", ["move-to-lisbon-ab12c", "a", "x" * 128])
def test_valid_slugs(slug: str) -> None:
    assert normalize_slug_param(f" {slug} ") == slug


@pytest.mark.parametrize(
    ("slug", "message"),
    [
        ("", "slug is required"),
        ("x" * 129, "slug must be 128 characters or fewer"),
        ("Upper-Case", "slug is invalid"),
        ("-leading", "slug is invalid"),
        ("trailing-", "slug is invalid"),
        ("under_score", "slug is invalid"),
    ],
)
def test_invalid_slugs(slug: str, message: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_slug_param(slug)
    assert exc_info.value.message == message


def test_viewer_id_parsing() -> None:
    viewer = uuid.uuid4()
    assert parse_viewer_id(f"  {viewer} ") == viewer
    with pytest.raises(ValidationError, match="viewer_id must be a valid UUID"):
        parse_viewer_id("not-a-uuid")
    with pytest.raises(ValidationError, match="voter_viewer_id must be a valid UUID"):
        parse_viewer_id("", field="voter_viewer_id")


def test_viewer_id_query() -> None:
    viewer = uuid.uuid4()
    assert parse_viewer_id_query([]) is None
    assert parse_viewer_id_query(["  "]) is None
    assert parse_viewer_id_query([str(viewer)]) == viewer
    with pytest.raises(ValidationError, match="only once"):
        parse_viewer_id_query([str(viewer), str(viewer)])
    with pytest.raises(ValidationError, match="valid UUID"):
        parse_viewer_id_query(["nope"])


def test_unexpected_query_params_are_rejected() -> None:
    validate_query_params(["viewer_id"], frozenset({"viewer_id"}))
    with pytest.raises(ValidationError, match="unexpected query parameter: debug"):
        validate_query_params(["viewer_id", "debug"], frozenset({"viewer_id"}))


@pytest.mark.parametrize(
    ("emoji", "rating"),
    [("🫠", 1), ("😭", 2), ("😬", 3), ("😄", 4), (" 🫡 ", 5)],
)
def test_emoji_maps_to_rating(emoji: str, rating: int) -> None:
    assert normalize_emoji(emoji) == (emoji.strip(), rating)


def test_unknown_emoji_is_rejected() -> None:
    with pytest.raises(ValidationError, match="emoji is invalid"):
        normalize_emoji("👍")


def test_suggestion_and_vote_ranges() -> None:
    assert [normalize_suggestion(v) for v in (1, 2, 3)] == [1, 2, 3]
    with pytest.raises(ValidationError, match="suggestion"):
        normalize_suggestion(4)
    assert normalize_vote_value(-1) == -1
    assert normalize_vote_value(1) == 1
    with pytest.raises(ValidationError, match="value must be -1 or 1"):
        normalize_vote_value(0)
