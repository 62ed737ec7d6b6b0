"""Service-level helpers for decisions and their responses."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import exists, select
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import Executable

from rate_my_decision.core.errors import ConflictError, NotFoundError
from rate_my_decision.db.errors import translate
from rate_my_decision.db.time import as_utc, utcnow
from rate_my_decision.models import Decision, DecisionResponse, DecisionVote
from rate_my_decision.services.scoring import (
    DecisionStats,
    Recommendation,
    ResponseRow,
    VoteSummary,
    compute_recommendation,
    compute_stats,
    summarize_votes,
)
from rate_my_decision.services.votes import RESPONSE_SUBJECT, load_vote_summaries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseCard:
    """A response as shown to visitors, with its vote summary."""

    response: DecisionResponse
    votes: VoteSummary


@dataclass(frozen=True)
class DecisionDetail:
    """Everything the decision page needs, recomputed from stored rows."""

    decision: Decision
    stats: DecisionStats
    recommendation: Recommendation
    post_vote: VoteSummary
    viewer_has_responded: bool
    responses: list[ResponseCard]


def _query(db: Session, stmt: Executable, message: str) -> Result[Any]:
    try:
        return db.execute(stmt)
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate(exc, message) from exc


def get_decision_by_slug(db: Session, slug: str) -> Decision:
    """Return the decision behind ``slug`` or raise NotFoundError."""
    decision = _query(
        db, select(Decision).where(Decision.slug == slug), "failed to load decision"
    ).scalar_one_or_none()
    if decision is None:
        raise NotFoundError("decision not found")
    return decision


def is_closed(decision: Decision) -> bool:
    return decision.closes_at is not None and utcnow() > as_utc(decision.closes_at)


def create_response(
    db: Session,
    decision: Decision,
    *,
    viewer_id: uuid.UUID,
    rating: int,
    suggestion: int,
    emoji: str,
    comment: str | None,
) -> DecisionResponse:
    """Record a viewer's single response to an open decision.

    Raises:
        ConflictError: If the decision is closed or the viewer already responded.
        StoreError: If the insert fails for any other reason.
    """
    if is_closed(decision):
        raise ConflictError("decision is closed")

    response = DecisionResponse(
        decision_id=decision.id,
        viewer_id=viewer_id,
        rating=rating,
        suggestion=suggestion,
        emoji=emoji,
        comment=comment,
    )
    db.add(response)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        error = translate(
            exc,
            "failed to create response",
            unique_message="viewer already submitted a response for this decision",
            foreign_key_message="decision not found",
        )
        if isinstance(error, ConflictError):
            logger.info("Duplicate response from viewer %s on decision %s", viewer_id, decision.id)
        raise error from exc

    logger.info("Recorded response %s on decision %s", response.id, decision.id)
    return response


def load_decision_detail(
    db: Session,
    decision: Decision,
    viewer_id: uuid.UUID | None = None,
) -> DecisionDetail:
    """Recompute stats, recommendation and vote summaries for one decision.

    The queries are not run in a single snapshot; concurrent writes may make
    the parts disagree by a vote or response.
    """
    responses = list(
        _query(
            db,
            select(DecisionResponse)
            .where(DecisionResponse.decision_id == decision.id)
            .order_by(DecisionResponse.created_at.desc(), DecisionResponse.id),
            "failed to load responses",
        ).scalars()
    )
    post_votes = _query(
        db,
        select(DecisionVote.voter_viewer_id, DecisionVote.value).where(
            DecisionVote.decision_id == decision.id
        ),
        "failed to load post votes",
    ).all()

    rows = [
        ResponseRow(rating=r.rating, suggestion=r.suggestion, emoji=r.emoji, comment=r.comment)
        for r in responses
    ]
    response_votes = load_vote_summaries(db, RESPONSE_SUBJECT, (r.id for r in responses), viewer_id)

    viewer_has_responded = False
    if viewer_id is not None:
        viewer_has_responded = bool(
            _query(
                db,
                select(
                    exists().where(
                        DecisionResponse.decision_id == decision.id,
                        DecisionResponse.viewer_id == viewer_id,
                    )
                ),
                "failed to load viewer response state",
            ).scalar()
        )

    return DecisionDetail(
        decision=decision,
        stats=compute_stats(rows),
        recommendation=compute_recommendation(rows, [value for _, value in post_votes]),
        post_vote=summarize_votes(((voter, value) for voter, value in post_votes), viewer_id),
        viewer_has_responded=viewer_has_responded,
        responses=[
            ResponseCard(response=r, votes=response_votes.get(r.id, VoteSummary()))
            for r in responses
        ],
    )
