"""Shared types for event rating systems."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from domain.ratings.protocol import DprPolicy, MatchClass

ALLIANCE_SIZE = 2


def match_label(match_class: MatchClass, series: int, match_id: int) -> str:
    """Short display label such as "Q12", "P3-1" or "P4"."""
    if match_class == MatchClass.QUALIFICATION:
        return f"Q{match_id}"
    if series:
        return f"P{series}-{match_id}"
    return f"P{match_id}"


@dataclass(frozen=True)
class Match:
    """Canonical match payload consumed by the rating estimator."""

    match_id: int
    red_teams: tuple[int, ...]
    blue_teams: tuple[int, ...]
    red_score: float | None
    blue_score: float | None
    match_class: MatchClass = MatchClass.QUALIFICATION
    description: str | None = None
    start_time: datetime | None = None
    series: int = 0

    @property
    def key(self) -> tuple[str, int, int]:
        """Event-unique identity; playoff numbering restarts per series."""
        return (self.match_class.value, self.series, self.match_id)

    @property
    def label(self) -> str:
        return match_label(self.match_class, self.series, self.match_id)

    @property
    def is_completed(self) -> bool:
        return self.red_score is not None and self.blue_score is not None

    @property
    def has_finite_scores(self) -> bool:
        return self.is_completed and math.isfinite(self.red_score) and math.isfinite(self.blue_score)

    @property
    def team_ids(self) -> tuple[int, ...]:
        return self.red_teams + self.blue_teams

    def alliance_of(self, team_id: int) -> str | None:
        """Return "red"/"blue" for a participating team, else None."""
        if team_id in self.red_teams:
            return "red"
        if team_id in self.blue_teams:
            return "blue"
        return None

    @property
    def has_full_alliances(self) -> bool:
        """True when both alliances hold two teams and nobody appears twice."""
        if len(self.red_teams) != ALLIANCE_SIZE or len(self.blue_teams) != ALLIANCE_SIZE:
            return False
        return len(set(self.team_ids)) == 2 * ALLIANCE_SIZE

    def as_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "match_key": self.label,
            "series": self.series,
            "red_teams": list(self.red_teams),
            "blue_teams": list(self.blue_teams),
            "red_score": self.red_score,
            "blue_score": self.blue_score,
            "match_class": self.match_class.value,
            "description": self.description,
            "start_time": None if self.start_time is None else self.start_time.isoformat(),
        }


@dataclass(frozen=True)
class TeamRating:
    """Least-squares rating for one team at one event."""

    team_id: int
    opr: float
    dpr: float
    ccwm: float
    matches_played: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "opr": self.opr,
            "dpr": self.dpr,
            "ccwm": self.ccwm,
            "matches_played": self.matches_played,
        }


@dataclass(frozen=True)
class RatingDiagnostics:
    """Counts describing what the estimator saw and how the solve behaved."""

    total_matches: int
    eligible_matches: int
    excluded_playoff: int = 0
    excluded_incomplete: int = 0
    excluded_malformed: int = 0
    teams_found: tuple[int, ...] = ()
    matrix_shape: tuple[int, int] = (0, 0)
    sample_match: Match | None = None
    pivot_count: int = 0
    regularized_pivots: int = 0
    reason: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.reason is not None

    @property
    def regularization_fraction(self) -> float:
        if self.pivot_count == 0:
            return 0.0
        return self.regularized_pivots / self.pivot_count

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_matches": self.total_matches,
            "eligible_matches": self.eligible_matches,
            "excluded_playoff": self.excluded_playoff,
            "excluded_incomplete": self.excluded_incomplete,
            "excluded_malformed": self.excluded_malformed,
            "teams_found": list(self.teams_found),
            "matrix_size": f"{self.matrix_shape[0]}x{self.matrix_shape[1]}",
            "sample_match": None if self.sample_match is None else self.sample_match.as_dict(),
            "pivot_count": self.pivot_count,
            "regularized_pivots": self.regularized_pivots,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class RatingEstimate:
    """Ratings for every team seen in eligible matches, ordered by team id."""

    ratings: tuple[TeamRating, ...]
    diagnostics: RatingDiagnostics
    dpr_policy: DprPolicy

    def get(self, team_id: int) -> TeamRating | None:
        """Return the team's rating, or None when it has no eligible matches."""
        for rating in self.ratings:
            if rating.team_id == team_id:
                return rating
        return None

    def team_ids(self) -> list[int]:
        return [rating.team_id for rating in self.ratings]

    def by_team(self) -> dict[int, TeamRating]:
        return {rating.team_id: rating for rating in self.ratings}

    def __len__(self) -> int:
        return len(self.ratings)


__all__ = [
    "ALLIANCE_SIZE",
    "Match",
    "RatingDiagnostics",
    "RatingEstimate",
    "TeamRating",
    "match_label",
]
