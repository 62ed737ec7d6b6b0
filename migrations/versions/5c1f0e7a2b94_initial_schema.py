"""initial schema

Revision ID: 5c1f0e7a2b94
Revises:
Create Date: 2026-10-18 09:12:41.503118

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f0e7a2b94"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    """Create decisions, responses and both vote tables."""
    op.create_table(
        "decisions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(length=128), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("closes_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "responses",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("decision_id", sa.Uuid(), nullable=False),
        sa.Column("viewer_id", sa.Uuid(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("suggestion", sa.Integer(), nullable=False),
        sa.Column("emoji", sa.Text(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_responses_rating"),
        sa.CheckConstraint("suggestion BETWEEN 1 AND 3", name="ck_responses_suggestion"),
        sa.ForeignKeyConstraint(["decision_id"], ["decisions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("decision_id", "viewer_id", name="uq_responses_decision_viewer"),
    )
    op.create_index(
        "ix_responses_decision_created_at", "responses", ["decision_id", "created_at"]
    )

    op.create_table(
        "decision_votes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("decision_id", sa.Uuid(), nullable=False),
        sa.Column("voter_viewer_id", sa.Uuid(), nullable=False),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("value IN (1, -1)", name="ck_decision_votes_value"),
        sa.ForeignKeyConstraint(["decision_id"], ["decisions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "decision_id", "voter_viewer_id", name="uq_decision_votes_decision_voter"
        ),
    )
    op.create_index("ix_decision_votes_decision_id", "decision_votes", ["decision_id"])

    op.create_table(
        "votes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("response_id", sa.Uuid(), nullable=False),
        sa.Column("voter_viewer_id", sa.Uuid(), nullable=False),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("value IN (1, -1)", name="ck_votes_value"),
        sa.ForeignKeyConstraint(["response_id"], ["responses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("response_id", "voter_viewer_id", name="uq_votes_response_voter"),
    )
    op.create_index("ix_votes_response_id", "votes", ["response_id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_votes_response_id", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_decision_votes_decision_id", table_name="decision_votes")
    op.drop_table("decision_votes")
    op.drop_index("ix_responses_decision_created_at", table_name="responses")
    op.drop_table("responses")
    op.drop_table("decisions")
