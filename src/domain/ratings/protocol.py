"""Shared enums for event rating systems."""

from __future__ import annotations

from enum import Enum


class MatchClass(str, Enum):
    """Tournament level a match was played at."""

    QUALIFICATION = "qualification"
    PLAYOFF = "playoff"


class DprPolicy(str, Enum):
    """How defensive ratings are derived from match data."""

    OPPONENT_SCORE_RESIDUAL = "opponent_score_residual"
    OPR_RESIDUAL = "opr_residual"


class PerformanceCategory(str, Enum):
    """Percentile bucket shown next to a team's rating."""

    ELITE = "Elite"
    STRONG = "Strong"
    AVERAGE = "Average"
    DEVELOPING = "Developing"
    NEEDS_WORK = "Needs Work"


class TrendDirection(str, Enum):
    """Direction of a team's scoring across its match sequence."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Confidence(str, Enum):
    """How much rating data backs a prediction."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


__all__ = [
    "Confidence",
    "DprPolicy",
    "MatchClass",
    "PerformanceCategory",
    "TrendDirection",
]
