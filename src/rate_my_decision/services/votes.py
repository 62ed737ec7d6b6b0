"""Transactional toggle voting on decision posts and on responses.

A viewer holds at most one vote per subject. Voting the same value again
removes it, voting the opposite value flips it, and the first vote inserts
it. Each toggle runs as one transaction that locks the subject row, applies
exactly one change, recomputes the summary and commits.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rate_my_decision.core.errors import DecisionServiceError, NotFoundError
from rate_my_decision.db.errors import translate
from rate_my_decision.db.time import utcnow
from rate_my_decision.models import Decision, DecisionResponse, DecisionVote, ResponseVote
from rate_my_decision.services.normalizer import normalize_vote_value
from rate_my_decision.services.scoring import VoteSummary, summarize_votes

logger = logging.getLogger(__name__)

__all__ = [
    "DECISION_SUBJECT",
    "RESPONSE_SUBJECT",
    "VoteSubject",
    "VoteTransition",
    "load_vote_summaries",
    "load_vote_summary",
    "toggle_vote",
]


class VoteTransition(Enum):
    """Which of the three state-machine edges a toggle took."""

    INSERTED = "inserted"
    REMOVED = "removed"
    FLIPPED = "flipped"


@dataclass(frozen=True)
class VoteSubject:
    """Binds a votable table to the vote table that references it."""

    name: str
    subject_model: Any
    vote_model: Any
    subject_column: str
    not_found_message: str

    def vote_subject_col(self) -> Any:
        return getattr(self.vote_model, self.subject_column)


DECISION_SUBJECT = VoteSubject(
    name="decision",
    subject_model=Decision,
    vote_model=DecisionVote,
    subject_column="decision_id",
    not_found_message="decision not found",
)

RESPONSE_SUBJECT = VoteSubject(
    name="response",
    subject_model=DecisionResponse,
    vote_model=ResponseVote,
    subject_column="response_id",
    not_found_message="response not found",
)


def load_vote_summary(
    db: Session,
    subject: VoteSubject,
    subject_id: uuid.UUID,
    viewer_id: uuid.UUID | None = None,
) -> VoteSummary:
    """Return the current vote summary of one subject."""
    vote = subject.vote_model
    rows = db.execute(
        select(vote.voter_viewer_id, vote.value).where(subject.vote_subject_col() == subject_id)
    ).all()
    return summarize_votes(((voter, value) for voter, value in rows), viewer_id)


def load_vote_summaries(
    db: Session,
    subject: VoteSubject,
    subject_ids: Iterable[uuid.UUID],
    viewer_id: uuid.UUID | None = None,
) -> dict[uuid.UUID, VoteSummary]:
    """Return vote summaries for many subjects of the same kind in one query."""
    ids = list(subject_ids)
    if not ids:
        return {}
    vote = subject.vote_model
    subject_col = subject.vote_subject_col()
    rows = db.execute(
        select(subject_col, vote.voter_viewer_id, vote.value).where(subject_col.in_(ids))
    ).all()

    grouped: dict[uuid.UUID, list[tuple[uuid.UUID, int]]] = {subject_id: [] for subject_id in ids}
    for subject_id, voter, value in rows:
        grouped.setdefault(subject_id, []).append((voter, value))
    return {subject_id: summarize_votes(pairs, viewer_id) for subject_id, pairs in grouped.items()}


def _apply_toggle(
    db: Session,
    subject: VoteSubject,
    subject_id: uuid.UUID,
    viewer_id: uuid.UUID,
    value: int,
) -> VoteTransition:
    # Locking the subject row queues concurrent togglers of the same subject,
    # so two first votes cannot race each other into the unique index.
    # NO KEY UPDATE leaves foreign-key inserts (new responses) unblocked.
    locked = db.execute(
        select(subject.subject_model.id)
        .where(subject.subject_model.id == subject_id)
        .with_for_update(key_share=True)
    ).scalar_one_or_none()
    if locked is None:
        raise NotFoundError(subject.not_found_message)

    vote_model = subject.vote_model
    existing = db.execute(
        select(vote_model)
        .where(
            subject.vote_subject_col() == subject_id,
            vote_model.voter_viewer_id == viewer_id,
        )
        .with_for_update()
    ).scalar_one_or_none()

    if existing is None:
        db.add(vote_model(**{subject.subject_column: subject_id}, voter_viewer_id=viewer_id, value=value))
        transition = VoteTransition.INSERTED
    elif existing.value == value:
        db.delete(existing)
        transition = VoteTransition.REMOVED
    else:
        existing.value = value
        existing.created_at = utcnow()
        transition = VoteTransition.FLIPPED

    db.flush()
    return transition


def toggle_vote(
    db: Session,
    subject: VoteSubject,
    subject_id: uuid.UUID,
    viewer_id: uuid.UUID,
    value: int,
) -> VoteSummary:
    """Toggle ``viewer_id``'s vote on a subject and return the committed summary.

    Args:
        db: Session owning the transaction; it is committed or rolled back here.
        subject: Which kind of subject is voted on.
        subject_id: Identifier of the decision or response.
        viewer_id: The anonymous voter.
        value: +1 or -1.

    Returns:
        Score, upvotes, downvotes and the viewer's vote after the toggle.

    Raises:
        ValidationError: If ``value`` is not +1 or -1.
        NotFoundError: If the subject does not exist.
        StoreError: If the store fails; nothing is written in that case.
    """
    value = normalize_vote_value(value)
    try:
        transition = _apply_toggle(db, subject, subject_id, viewer_id, value)
        summary = load_vote_summary(db, subject, subject_id, viewer_id)
        db.commit()
    except DecisionServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate(
            exc,
            f"failed to toggle {subject.name} vote",
            foreign_key_message=subject.not_found_message,
        ) from exc

    logger.info(
        "Vote %s on %s %s by viewer %s (score=%d)",
        transition.value,
        subject.name,
        subject_id,
        viewer_id,
        summary.score,
    )
    return summary
