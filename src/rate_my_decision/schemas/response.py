"""Response-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ResponseCreate(BaseModel):
    """Body of ``POST /api/decisions/{slug}/responses``."""

    model_config = ConfigDict(extra="forbid", strict=True)

    viewer_id: str
    suggestion: int = Field(..., description="1 = don't do it, 2 = mixed, 3 = do it")
    emoji: str
    comment: str | None = None
    # Accepted from older clients but ignored: the emoji decides the rating.
    rating: int | None = None


class ResponseCreated(BaseModel):
    id: str


class ResponseCardOut(BaseModel):
    id: str
    rating: int
    suggestion: int
    emoji: str
    comment: str | None
    created_at: datetime
    score: int
    upvotes: int
    downvotes: int
    my_vote: int
