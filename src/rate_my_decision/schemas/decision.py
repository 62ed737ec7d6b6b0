"""Decision-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .response import ResponseCardOut
from .vote import VoteSummaryOut


class DecisionCreate(BaseModel):
    """Body of ``POST /api/decisions``.

    Length and character rules are enforced by the normalizer so the error
    messages match the rest of the API.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    title: str
    description: str | None = None
    closes_at: datetime | None = None


class DecisionCreated(BaseModel):
    id: str
    slug: str
    share_url: str


class DecisionOut(BaseModel):
    id: str
    slug: str
    title: str
    description: str | None
    closes_at: datetime | None
    created_at: datetime


class EmojiCountOut(BaseModel):
    emoji: str
    count: int


class CategoriesOut(BaseModel):
    do_it: int
    dont_do_it: int
    mixed: int


class DecisionStatsOut(BaseModel):
    response_count: int
    rating_counts: list[int] = Field(..., description="Counts for ratings 1 through 5")
    avg_rating: float
    net_sentiment: float = Field(..., ge=-1.0, le=1.0)
    categories: CategoriesOut
    emoji_counts: list[EmojiCountOut]
    top_emoji: str


class RecommendationOut(BaseModel):
    decision: str = Field(..., description='"yes" when score >= 0, otherwise "no"')
    score: float
    suggestion_score: float
    rating_score: float
    comment_sentiment: float
    post_vote_score: float


class DecisionEnvelope(BaseModel):
    """Everything the shared decision page renders."""

    decision: DecisionOut
    stats: DecisionStatsOut
    recommendation: RecommendationOut
    post_vote: VoteSummaryOut
    viewer_has_responded: bool
    responses: list[ResponseCardOut]
