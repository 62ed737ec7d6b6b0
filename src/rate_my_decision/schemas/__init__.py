"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .decision import DecisionCreate, DecisionCreated, DecisionEnvelope
from .response import ResponseCardOut, ResponseCreate, ResponseCreated
from .vote import (
    DecisionVoteSummaryOut,
    ResponseVoteCreate,
    ResponseVoteSummaryOut,
    VoteCreate,
    VoteSummaryOut,
)

__all__ = [
    "DecisionCreate", "DecisionCreated", "DecisionEnvelope",
    "ResponseCardOut", "ResponseCreate", "ResponseCreated",
    "DecisionVoteSummaryOut", "ResponseVoteCreate", "ResponseVoteSummaryOut",
    "VoteCreate", "VoteSummaryOut",
]
