"""Models capturing up/down votes on decisions and on responses."""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from rate_my_decision.db.session import Base
from rate_my_decision.db.time import utcnow


class DecisionVote(Base):
    """Per-viewer vote on a decision post."""

    __tablename__ = "decision_votes"
    __table_args__ = (
        UniqueConstraint("decision_id", "voter_viewer_id", name="uq_decision_votes_decision_voter"),
        CheckConstraint("value IN (1, -1)", name="ck_decision_votes_value"),
        Index("ix_decision_votes_decision_id", "decision_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    decision_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("decisions.id", ondelete="CASCADE"),
        nullable=False,
    )
    voter_viewer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 1 = upvote, -1 = downvote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    # Refreshed when a vote flips direction.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class ResponseVote(Base):
    """Per-viewer vote on a single response."""

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("response_id", "voter_viewer_id", name="uq_votes_response_voter"),
        CheckConstraint("value IN (1, -1)", name="ck_votes_value"),
        Index("ix_votes_response_id", "response_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    response_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
    )
    voter_viewer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
