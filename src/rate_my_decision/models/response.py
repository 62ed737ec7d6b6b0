"""SQLAlchemy model for viewer responses."""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from rate_my_decision.db.session import Base
from rate_my_decision.db.time import utcnow


class DecisionResponse(Base):
    """One viewer's rating, suggestion, emoji and optional comment on a decision."""

    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("decision_id", "viewer_id", name="uq_responses_decision_viewer"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_responses_rating"),
        CheckConstraint("suggestion BETWEEN 1 AND 3", name="ck_responses_suggestion"),
        Index("ix_responses_decision_created_at", "decision_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    decision_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("decisions.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Client-generated and unauthenticated.
    viewer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # Derived from the emoji table, never taken from the client.
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    # 1 = don't do it, 2 = mixed, 3 = do it.
    suggestion: Mapped[int] = mapped_column(Integer, nullable=False)
    emoji: Mapped[str] = mapped_column(Text, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
