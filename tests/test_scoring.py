"""Tests for stats, comment sentiment and recommendation scoring."""

from __future__ import annotations

import uuid

import pytest

from rate_my_decision.services.scoring import (
    NEGATIVE_WORDS,
    POSITIVE_WORDS,
    ResponseRow,
    comment_sentiment,
    compute_recommendation,
    compute_stats,
    summarize_votes,
    tokenize,
)


def row(rating: int, suggestion: int, emoji: str = "😄", comment: str | None = None) -> ResponseRow:
    return ResponseRow(rating=rating, suggestion=suggestion, emoji=emoji, comment=comment)


def test_lexicons_are_disjoint() -> None:
    assert not POSITIVE_WORDS & NEGATIVE_WORDS


def test_empty_stats() -> None:
    stats = compute_stats([])
    assert stats.response_count == 0
    assert stats.rating_counts == [0, 0, 0, 0, 0]
    assert stats.avg_rating == 0
    assert stats.net_sentiment == 0
    assert stats.emoji_counts == []
    assert stats.top_emoji == ""


def test_stats_distribution_and_categories() -> None:
    stats = compute_stats(
        [row(5, 3, "🫡"), row(4, 3, "😄"), row(1, 1, "🫠"), row(4, 2, "😄")]
    )
    assert stats.response_count == 4
    assert stats.rating_counts == [1, 0, 0, 2, 1]
    assert stats.avg_rating == pytest.approx(3.5)
    assert stats.net_sentiment == pytest.approx(0.25)
    assert (stats.categories.dont_do_it, stats.categories.mixed, stats.categories.do_it) == (1, 1, 2)
    assert [(e.emoji, e.count) for e in stats.emoji_counts][0] == ("😄", 2)
    assert stats.top_emoji == "😄"


@pytest.mark.parametrize(("rating", "expected"), [(1, -1.0), (3, 0.0), (5, 1.0)])
def test_net_sentiment_maps_average_rating(rating: int, expected: float) -> None:
    assert compute_stats([row(rating, 2)]).net_sentiment == pytest.approx(expected)


def test_emoji_ties_break_by_emoji() -> None:
    stats = compute_stats([row(3, 2, "😬"), row(2, 2, "😭")])
    ordered = [e.emoji for e in stats.emoji_counts]
    assert ordered == sorted(["😬", "😭"])
    assert stats.top_emoji == ordered[0]


def test_tokenize_strips_apostrophes_and_splits_on_punctuation() -> None:
    assert tokenize("It's a GREAT_idea, isn't it?") == ["its", "a", "great", "idea", "isnt", "it"]


@pytest.mark.parametrize(
    ("comment", "expected"),
    [
        ("This is a great opportunity", 1.0),
        ("Too risky and expensive", -1.0),
        ("great opportunity but risky", 1 / 3),
        ("This is a great opportunity, no risk", 0.0),
        ("amazing and safe", 1.0),
        ("no idea honestly", -1.0),
        ("the weather in Lisbon", 0.0),
        ("", 0.0),
    ],
)
def test_comment_sentiment(comment: str, expected: float) -> None:
    assert comment_sentiment(comment) == pytest.approx(expected)


def test_recommendation_without_inputs_is_a_yes_tie() -> None:
    recommendation = compute_recommendation([], [])
    assert recommendation.score == 0
    assert recommendation.decision == "yes"


def test_recommendation_all_positive() -> None:
    responses = [row(5, 3, "🫡", "great opportunity") for _ in range(3)]
    recommendation = compute_recommendation(responses, [1, 1])
    assert recommendation.suggestion_score == pytest.approx(1.0)
    assert recommendation.rating_score == pytest.approx(1.0)
    assert recommendation.comment_sentiment == pytest.approx(1.0)
    assert recommendation.post_vote_score == pytest.approx(1.0)
    assert recommendation.score == pytest.approx(1.0)
    assert recommendation.decision == "yes"


def test_recommendation_all_negative() -> None:
    responses = [row(1, 1, "🫠", "terrible risk, worst idea") for _ in range(2)]
    recommendation = compute_recommendation(responses, [-1])
    assert recommendation.score == pytest.approx(-1.0)
    assert recommendation.decision == "no"


def test_missing_signals_contribute_zero_without_renormalizing() -> None:
    recommendation = compute_recommendation([row(5, 3)], [])
    assert recommendation.comment_sentiment == 0
    assert recommendation.post_vote_score == 0
    assert recommendation.score == pytest.approx(0.35 + 0.30)


def test_comment_sentiment_averages_only_commented_responses() -> None:
    responses = [row(3, 2, comment="great"), row(3, 2), row(3, 2, comment="nothing to say")]
    recommendation = compute_recommendation(responses, [])
    assert recommendation.comment_sentiment == pytest.approx(0.5)
    assert recommendation.score == pytest.approx(0.20 * 0.5)


def test_balanced_inputs_tie_to_yes() -> None:
    responses = [row(5, 3), row(1, 1)]
    recommendation = compute_recommendation(responses, [1, -1])
    assert recommendation.score == pytest.approx(0.0)
    assert recommendation.decision == "yes"


def test_summarize_votes() -> None:
    viewer, other, third = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    votes = [(viewer, -1), (other, 1), (third, 1)]

    summary = summarize_votes(votes, viewer)
    assert (summary.score, summary.upvotes, summary.downvotes, summary.my_vote) == (1, 2, 1, -1)
    assert summarize_votes(votes).my_vote == 0
    assert summarize_votes([], viewer).score == 0
