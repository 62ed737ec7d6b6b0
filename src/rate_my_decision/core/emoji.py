"""Emoji allow-list and the emoji → rating table.

Responses no longer carry a client-chosen rating: the emoji a viewer picks is
the rating. The table is versioned so a future glyph set can be introduced
without touching validation or scoring code.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

EMOJI_TABLE_VERSION: Final[int] = 2

# 1 = worst, 5 = best.
EMOJI_RATINGS: Final[Mapping[str, int]] = MappingProxyType(
    {
        "🫠": 1,
        "😭": 2,
        "😬": 3,
        "😄": 4,
        "🫡": 5,
    }
)

ALLOWED_EMOJI: Final[frozenset[str]] = frozenset(EMOJI_RATINGS)


def rating_for_emoji(emoji: str) -> int | None:
    """Return the rating an allowed emoji maps to, or None when it is not allowed."""
    return EMOJI_RATINGS.get(emoji)
