"""Rating-system domain modules."""

from domain.ratings.common import (
    Match,
    RatingDiagnostics,
    RatingEstimate,
    TeamRating,
)
from domain.ratings.protocol import (
    Confidence,
    DprPolicy,
    MatchClass,
    PerformanceCategory,
    TrendDirection,
)

__all__ = [
    "Confidence",
    "DprPolicy",
    "Match",
    "MatchClass",
    "PerformanceCategory",
    "RatingDiagnostics",
    "RatingEstimate",
    "TeamRating",
    "TrendDirection",
]
