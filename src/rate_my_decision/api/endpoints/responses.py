"""Per-response vote endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from rate_my_decision.api.body import MAX_VOTE_BODY_BYTES, json_body
from rate_my_decision.api.dependencies import (
    SessionDep,
    ViewerLimiterDep,
    enforce_viewer_rate_limit,
    require_write_api_key,
)
from rate_my_decision.core.errors import ValidationError
from rate_my_decision.schemas import ResponseVoteCreate, ResponseVoteSummaryOut
from rate_my_decision.services.normalizer import parse_viewer_id
from rate_my_decision.services.rate_limiter import FixedWindowLimiter
from rate_my_decision.services.votes import RESPONSE_SUBJECT, toggle_vote

from .serializers import vote_summary_fields

router = APIRouter(prefix="/api/responses", tags=["responses"])

ResponseVoteBody = Annotated[
    ResponseVoteCreate, Depends(json_body(ResponseVoteCreate, MAX_VOTE_BODY_BYTES))
]


def response_id_path(response_id: Annotated[str, Path()]) -> uuid.UUID:
    try:
        return uuid.UUID(response_id.strip())
    except ValueError:
        raise ValidationError("response_id must be a valid UUID") from None


ResponseIdDep = Annotated[uuid.UUID, Depends(response_id_path)]


def _vote_on_response(
    response_id: uuid.UUID,
    body: ResponseVoteCreate,
    db: Session,
    viewer_limiter: FixedWindowLimiter,
) -> ResponseVoteSummaryOut:
    field = "viewer_id" if body.viewer_id is not None else "voter_viewer_id"
    viewer_id = parse_viewer_id(body.voter, field=field)
    enforce_viewer_rate_limit(viewer_limiter, viewer_id)

    summary = toggle_vote(db, RESPONSE_SUBJECT, response_id, viewer_id, body.value)
    return ResponseVoteSummaryOut(response_id=str(response_id), **vote_summary_fields(summary))


@router.post(
    "/{response_id}/vote",
    response_model=ResponseVoteSummaryOut,
    dependencies=[Depends(require_write_api_key)],
)
def post_response_vote(
    response_id: ResponseIdDep,
    body: ResponseVoteBody,
    db: SessionDep,
    viewer_limiter: ViewerLimiterDep,
) -> ResponseVoteSummaryOut:
    """Toggle the viewer's up/down vote on one response.

    Voting the same value twice removes the vote; the opposite value flips it.
    """
    return _vote_on_response(response_id, body, db, viewer_limiter)


@router.post(
    "/{response_id}/votes",
    response_model=ResponseVoteSummaryOut,
    dependencies=[Depends(require_write_api_key)],
)
def post_response_votes(
    response_id: ResponseIdDep,
    body: ResponseVoteBody,
    db: SessionDep,
    viewer_limiter: ViewerLimiterDep,
) -> ResponseVoteSummaryOut:
    return _vote_on_response(response_id, body, db, viewer_limiter)
