"""Rate My Decision: anonymous ratings, votes and recommendations for life decisions."""

__version__ = "0.1.0"
