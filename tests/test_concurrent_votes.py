"""Concurrent toggle voting against a file-backed SQLite store."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from rate_my_decision.db.session import Base, build_engine
from rate_my_decision.models import Decision, DecisionVote
from rate_my_decision.services.scoring import VoteSummary
from rate_my_decision.services.slugs import create_decision
from rate_my_decision.services.votes import DECISION_SUBJECT, load_vote_summary, toggle_vote

TOGGLERS = 50


@pytest.fixture()
def file_engine(tmp_path: Path) -> Iterator[Engine]:
    engine = build_engine(f"sqlite:///{tmp_path / 'votes.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def file_sessions(file_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=file_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def shared_decision(file_sessions: sessionmaker[Session]) -> Decision:
    with file_sessions() as db:
        return create_decision(db, title="Run a marathon", description=None, closes_at=None)


def _toggle(sessions: sessionmaker[Session], decision_id: uuid.UUID, viewer: uuid.UUID, value: int) -> VoteSummary:
    with sessions() as db:
        return toggle_vote(db, DECISION_SUBJECT, decision_id, viewer, value)


def _vote_rows(sessions: sessionmaker[Session], decision_id: uuid.UUID) -> int:
    with sessions() as db:
        return db.scalar(
            select(func.count()).select_from(DecisionVote).where(DecisionVote.decision_id == decision_id)
        )


def test_same_viewer_toggling_concurrently_keeps_one_row(
    file_sessions: sessionmaker[Session], shared_decision: Decision
) -> None:
    viewer = uuid.uuid4()
    with ThreadPoolExecutor(max_workers=8) as pool:
        summaries = list(
            pool.map(lambda _: _toggle(file_sessions, shared_decision.id, viewer, 1), range(TOGGLERS))
        )

    assert all(summary.score in (0, 1) for summary in summaries)
    # Serialized toggles alternate insert and delete; an even count ends empty.
    assert _vote_rows(file_sessions, shared_decision.id) == 0
    with file_sessions() as db:
        final = load_vote_summary(db, DECISION_SUBJECT, shared_decision.id, viewer)
    assert final == VoteSummary(score=0, upvotes=0, downvotes=0, my_vote=0)


def test_same_viewer_mixed_values_never_duplicates(
    file_sessions: sessionmaker[Session], shared_decision: Decision
) -> None:
    viewer = uuid.uuid4()
    values = [1 if i % 3 else -1 for i in range(TOGGLERS)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda v: _toggle(file_sessions, shared_decision.id, viewer, v), values))

    assert _vote_rows(file_sessions, shared_decision.id) <= 1
    with file_sessions() as db:
        final = load_vote_summary(db, DECISION_SUBJECT, shared_decision.id, viewer)
    assert final.score in (-1, 0, 1)
    assert final.my_vote == final.score


def test_distinct_viewers_all_count(
    file_sessions: sessionmaker[Session], shared_decision: Decision
) -> None:
    viewers = [uuid.uuid4() for _ in range(TOGGLERS)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda v: _toggle(file_sessions, shared_decision.id, v, 1), viewers))

    assert _vote_rows(file_sessions, shared_decision.id) == TOGGLERS
    with file_sessions() as db:
        final = load_vote_summary(db, DECISION_SUBJECT, shared_decision.id)
    assert (final.score, final.upvotes, final.downvotes) == (TOGGLERS, TOGGLERS, 0)
