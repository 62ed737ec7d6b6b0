"""Decision endpoints: create, read, respond and vote on the post."""

from __future__ import annotations

from typing import Annotated, Final

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from rate_my_decision.api.body import (
    MAX_DECISION_BODY_BYTES,
    MAX_RESPONSE_BODY_BYTES,
    MAX_VOTE_BODY_BYTES,
    json_body,
)
from rate_my_decision.api.dependencies import (
    SessionDep,
    SettingsDep,
    SlugDep,
    ViewerLimiterDep,
    enforce_viewer_rate_limit,
    require_write_api_key,
)
from rate_my_decision.schemas import (
    DecisionCreate,
    DecisionCreated,
    DecisionEnvelope,
    DecisionVoteSummaryOut,
    ResponseCreate,
    ResponseCreated,
    VoteCreate,
)
from rate_my_decision.services import decisions as decision_service
from rate_my_decision.services.normalizer import (
    normalize_closes_at,
    normalize_comment,
    normalize_description,
    normalize_emoji,
    normalize_suggestion,
    normalize_title,
    parse_viewer_id,
    parse_viewer_id_query,
    validate_query_params,
)
from rate_my_decision.services.rate_limiter import FixedWindowLimiter
from rate_my_decision.services.scoring import VoteSummary
from rate_my_decision.services.slugs import create_decision
from rate_my_decision.services.votes import DECISION_SUBJECT, toggle_vote

from .serializers import decision_envelope, vote_summary_fields

router = APIRouter(prefix="/api/decisions", tags=["decisions"])

GET_DECISION_QUERY_PARAMS: Final[frozenset[str]] = frozenset({"viewer_id"})

WriteGate = [Depends(require_write_api_key)]
DecisionBody = Annotated[DecisionCreate, Depends(json_body(DecisionCreate, MAX_DECISION_BODY_BYTES))]
ResponseBody = Annotated[ResponseCreate, Depends(json_body(ResponseCreate, MAX_RESPONSE_BODY_BYTES))]
VoteBody = Annotated[VoteCreate, Depends(json_body(VoteCreate, MAX_VOTE_BODY_BYTES))]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DecisionCreated,
    dependencies=WriteGate,
)
def post_decision(body: DecisionBody, db: SessionDep, settings: SettingsDep) -> DecisionCreated:
    """Create a decision and return its shareable slug."""
    decision = create_decision(
        db,
        title=normalize_title(body.title),
        description=normalize_description(body.description),
        closes_at=normalize_closes_at(body.closes_at),
    )
    return DecisionCreated(
        id=str(decision.id),
        slug=decision.slug,
        share_url=f"{settings.share_url_prefix}{decision.slug}",
    )


@router.get("/{slug}", response_model=DecisionEnvelope)
def get_decision(
    slug: SlugDep,
    request: Request,
    db: SessionDep,
    viewer_limiter: ViewerLimiterDep,
) -> DecisionEnvelope:
    """Return the decision with freshly computed stats and recommendation.

    The optional ``viewer_id`` query parameter personalises ``my_vote`` and
    ``viewer_has_responded``, and counts against that viewer's rate limit.
    """
    validate_query_params(list(request.query_params.keys()), GET_DECISION_QUERY_PARAMS)
    viewer_id = parse_viewer_id_query(request.query_params.getlist("viewer_id"))
    if viewer_id is not None:
        enforce_viewer_rate_limit(viewer_limiter, viewer_id)

    decision = decision_service.get_decision_by_slug(db, slug)
    detail = decision_service.load_decision_detail(db, decision, viewer_id)
    return decision_envelope(detail)


@router.post(
    "/{slug}/responses",
    status_code=status.HTTP_201_CREATED,
    response_model=ResponseCreated,
    dependencies=WriteGate,
)
def post_response(
    slug: SlugDep,
    body: ResponseBody,
    db: SessionDep,
    viewer_limiter: ViewerLimiterDep,
) -> ResponseCreated:
    """Submit the viewer's one response to a decision."""
    viewer_id = parse_viewer_id(body.viewer_id)
    enforce_viewer_rate_limit(viewer_limiter, viewer_id)

    suggestion = normalize_suggestion(body.suggestion)
    emoji, rating = normalize_emoji(body.emoji)
    comment = normalize_comment(body.comment)

    decision = decision_service.get_decision_by_slug(db, slug)
    response = decision_service.create_response(
        db,
        decision,
        viewer_id=viewer_id,
        rating=rating,
        suggestion=suggestion,
        emoji=emoji,
        comment=comment,
    )
    return ResponseCreated(id=str(response.id))


def _vote_on_decision(
    slug: str,
    body: VoteCreate,
    db: Session,
    viewer_limiter: FixedWindowLimiter,
) -> DecisionVoteSummaryOut:
    viewer_id = parse_viewer_id(body.viewer_id)
    enforce_viewer_rate_limit(viewer_limiter, viewer_id)

    decision = decision_service.get_decision_by_slug(db, slug)
    summary: VoteSummary = toggle_vote(db, DECISION_SUBJECT, decision.id, viewer_id, body.value)
    return DecisionVoteSummaryOut(decision_id=str(decision.id), **vote_summary_fields(summary))


@router.post("/{slug}/vote", response_model=DecisionVoteSummaryOut, dependencies=WriteGate)
def post_decision_vote(
    slug: SlugDep,
    body: VoteBody,
    db: SessionDep,
    viewer_limiter: ViewerLimiterDep,
) -> DecisionVoteSummaryOut:
    """Toggle the viewer's up/down vote on the decision post."""
    return _vote_on_decision(slug, body, db, viewer_limiter)


@router.post("/{slug}/votes", response_model=DecisionVoteSummaryOut, dependencies=WriteGate)
def post_decision_votes(
    slug: SlugDep,
    body: VoteBody,
    db: SessionDep,
    viewer_limiter: ViewerLimiterDep,
) -> DecisionVoteSummaryOut:
    return _vote_on_decision(slug, body, db, viewer_limiter)
