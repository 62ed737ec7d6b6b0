"""SQLAlchemy models for the Rate My Decision service."""

from .decision import Decision
from .response import DecisionResponse
from .vote import DecisionVote, ResponseVote

__all__ = [
    "Decision",
    "DecisionResponse",
    "DecisionVote", "ResponseVote",
]
