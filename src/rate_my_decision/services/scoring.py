"""Deterministic statistics, sentiment and recommendation scoring.

Everything in this module is a pure function of the rows passed in: the same
responses and votes always produce the same numbers.
"""

from __future__ import annotations

import re
import uuid
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Final

SUGGESTION_WEIGHT: Final[float] = 0.35
RATING_WEIGHT: Final[float] = 0.30
COMMENT_SENTIMENT_WEIGHT: Final[float] = 0.20
POST_VOTE_WEIGHT: Final[float] = 0.15
# Ties go to "yes".
RECOMMENDATION_YES_THRESHOLD: Final[float] = 0.0

POSITIVE_WORDS: Final[frozenset[str]] = frozenset(
    {
        "amazing", "benefit", "best", "better", "excellent", "good", "great",
        "growth", "happy", "love", "opportunity", "positive", "safe", "smart",
        "strong", "support", "upside", "win", "worth", "yes",
    }
)

NEGATIVE_WORDS: Final[frozenset[str]] = frozenset(
    {
        "bad", "concern", "costly", "difficult", "downside", "expensive", "hard",
        "hate", "loss", "negative", "no", "problem", "risk", "risky", "stress",
        "unsafe", "worse", "worst",
    }
)

# Letters, digits and apostrophes; underscore is a separator.
_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r"(?:[^\W_]|')+")

_SUGGESTION_SCORES: Final[dict[int, float]] = {1: -1.0, 2: 0.0, 3: 1.0}


@dataclass(frozen=True)
class ResponseRow:
    """The response columns the scoring engine reads."""

    rating: int
    suggestion: int
    emoji: str
    comment: str | None = None


@dataclass(frozen=True)
class EmojiCount:
    emoji: str
    count: int


@dataclass(frozen=True)
class CategoryBuckets:
    dont_do_it: int = 0
    mixed: int = 0
    do_it: int = 0


@dataclass(frozen=True)
class DecisionStats:
    """Aggregated view of every response to one decision."""

    response_count: int
    rating_counts: list[int]
    avg_rating: float
    net_sentiment: float
    categories: CategoryBuckets
    emoji_counts: list[EmojiCount] = field(default_factory=list)
    top_emoji: str = ""


@dataclass(frozen=True)
class Recommendation:
    decision: str
    score: float
    suggestion_score: float
    rating_score: float
    comment_sentiment: float
    post_vote_score: float


@dataclass(frozen=True)
class VoteSummary:
    score: int = 0
    upvotes: int = 0
    downvotes: int = 0
    my_vote: int = 0


def clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def rating_to_score(rating: float) -> float:
    """Map a rating (or rating average) from [1, 5] onto [-1, 1]."""
    return clamp((rating - 3.0) / 2.0)


def suggestion_to_score(suggestion: int) -> float:
    return _SUGGESTION_SCORES.get(suggestion, 0.0)


def tokenize(comment: str) -> list[str]:
    """Split a comment into lowercase word tokens with apostrophes removed."""
    tokens = (token.replace("'", "") for token in _TOKEN_RE.findall(comment.lower()))
    return [token for token in tokens if token]


def comment_sentiment(comment: str) -> float:
    """Score a comment in [-1, 1] from lexicon hits.

    Words outside both lexicons are ignored; a comment without hits scores 0.
    """
    positive = negative = 0
    for token in tokenize(comment):
        if token in POSITIVE_WORDS:
            positive += 1
        elif token in NEGATIVE_WORDS:
            negative += 1
    hits = positive + negative
    if hits == 0:
        return 0.0
    return clamp((positive - negative) / hits)


def compute_stats(responses: Sequence[ResponseRow]) -> DecisionStats:
    """Recompute the rating distribution, sentiment, categories and emoji ranking."""
    rating_counts = [0] * 5
    suggestions: Counter[int] = Counter()
    emojis: Counter[str] = Counter()
    rating_total = 0

    for row in responses:
        if 1 <= row.rating <= 5:
            rating_counts[row.rating - 1] += 1
        rating_total += row.rating
        suggestions[row.suggestion] += 1
        emojis[row.emoji] += 1

    count = len(responses)
    avg_rating = rating_total / count if count else 0.0
    net_sentiment = rating_to_score(avg_rating) if count else 0.0

    emoji_counts = [
        EmojiCount(emoji=emoji, count=n)
        for emoji, n in sorted(emojis.items(), key=lambda item: (-item[1], item[0]))
    ]

    return DecisionStats(
        response_count=count,
        rating_counts=rating_counts,
        avg_rating=avg_rating,
        net_sentiment=net_sentiment,
        categories=CategoryBuckets(
            dont_do_it=suggestions[1],
            mixed=suggestions[2],
            do_it=suggestions[3],
        ),
        emoji_counts=emoji_counts,
        top_emoji=emoji_counts[0].emoji if emoji_counts else "",
    )


def compute_recommendation(
    responses: Sequence[ResponseRow],
    post_vote_values: Sequence[int],
) -> Recommendation:
    """Blend suggestion, rating, comment sentiment and post votes into a verdict.

    Each signal is a mean clamped to [-1, 1]. A signal with no inputs
    contributes 0 and the remaining weights are not renormalized.

    Args:
        responses: Every response to the decision.
        post_vote_values: The +1/-1 values of every vote on the decision post.

    Returns:
        The weighted score, each component signal and the yes/no verdict.
    """
    suggestion_score = rating_score = sentiment = post_vote_score = 0.0

    if responses:
        suggestion_score = clamp(
            sum(suggestion_to_score(row.suggestion) for row in responses) / len(responses)
        )
        rating_score = clamp(sum(rating_to_score(row.rating) for row in responses) / len(responses))

    commented = [row.comment for row in responses if row.comment is not None]
    if commented:
        sentiment = clamp(sum(comment_sentiment(text) for text in commented) / len(commented))

    if post_vote_values:
        post_vote_score = clamp(sum(post_vote_values) / len(post_vote_values))

    score = clamp(
        SUGGESTION_WEIGHT * suggestion_score
        + RATING_WEIGHT * rating_score
        + COMMENT_SENTIMENT_WEIGHT * sentiment
        + POST_VOTE_WEIGHT * post_vote_score
    )

    return Recommendation(
        decision="yes" if score >= RECOMMENDATION_YES_THRESHOLD else "no",
        score=score,
        suggestion_score=suggestion_score,
        rating_score=rating_score,
        comment_sentiment=sentiment,
        post_vote_score=post_vote_score,
    )


def summarize_votes(
    votes: Iterable[tuple[uuid.UUID, int]],
    viewer_id: uuid.UUID | None = None,
) -> VoteSummary:
    """Summarize (voter, value) pairs for one subject from ``viewer_id``'s perspective."""
    score = upvotes = downvotes = my_vote = 0
    for voter, value in votes:
        score += value
        if value == 1:
            upvotes += 1
        elif value == -1:
            downvotes += 1
        if viewer_id is not None and voter == viewer_id:
            my_vote = value
    return VoteSummary(score=score, upvotes=upvotes, downvotes=downvotes, my_vote=my_vote)
