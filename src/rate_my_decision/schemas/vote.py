"""Vote-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VoteCreate(BaseModel):
    """Body of the decision vote endpoints."""

    model_config = ConfigDict(extra="forbid", strict=True)

    viewer_id: str
    value: int = Field(..., description="1 for upvote, -1 for downvote")


class ResponseVoteCreate(BaseModel):
    """Body of the per-response vote endpoints.

    Older clients send ``voter_viewer_id``; newer ones send ``viewer_id``.
    Exactly one of the two must be present.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    viewer_id: str | None = None
    voter_viewer_id: str | None = None
    value: int = Field(..., description="1 for upvote, -1 for downvote")

    @model_validator(mode="after")
    def _one_viewer_field(self) -> "ResponseVoteCreate":
        if (self.viewer_id is None) == (self.voter_viewer_id is None):
            raise ValueError("exactly one of viewer_id or voter_viewer_id is required")
        return self

    @property
    def voter(self) -> str:
        return self.viewer_id if self.viewer_id is not None else self.voter_viewer_id or ""


class VoteSummaryOut(BaseModel):
    score: int
    upvotes: int
    downvotes: int
    my_vote: int


class DecisionVoteSummaryOut(VoteSummaryOut):
    decision_id: str


class ResponseVoteSummaryOut(VoteSummaryOut):
    response_id: str
