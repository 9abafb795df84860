"""Ranks, percentiles and descriptive statistics built on event ratings."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from statistics import fmean
from typing import Any

from domain.ratings.common import Match, TeamRating
from domain.ratings.opr.calculator import is_eligible
from domain.ratings.protocol import PerformanceCategory, TrendDirection

TREND_MIN_MATCHES = 4
TREND_UP_RATIO = 1.15
TREND_DOWN_RATIO = 0.85


@dataclass(frozen=True)
class TeamStanding:
    rating: TeamRating
    rank: int
    percentile: float
    dpr_rank: int
    ccwm_rank: int
    category: PerformanceCategory

    @property
    def team_id(self) -> int:
        return self.rating.team_id

    def as_dict(self) -> dict[str, Any]:
        return {
            **self.rating.as_dict(),
            "rank": self.rank,
            "percentile": round(self.percentile, 1),
            "dpr_rank": self.dpr_rank,
            "ccwm_rank": self.ccwm_rank,
            "category": self.category.value,
        }


@dataclass(frozen=True)
class PerformanceBreakdown:
    strong_matches: int
    average_matches: int
    weak_matches: int
    trend: TrendDirection


@dataclass(frozen=True)
class TeamInsights:
    strengths: tuple[str, ...] = field(default_factory=tuple)
    improvements: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TeamMatchSummary:
    """Win/loss record and scoring over a team's completed matches."""

    team_id: int
    wins: int
    losses: int
    ties: int
    average_score: float
    high_score: float
    average_margin: float

    @property
    def played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_rate(self) -> float:
        if self.played == 0:
            return 0.0
        return self.wins / self.played * 100.0


@dataclass(frozen=True)
class EventSummary:
    team_count: int
    average_opr: float
    average_dpr: float
    average_ccwm: float
    top_opr: float
    top_dpr: float
    top_ccwm: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "team_count": self.team_count,
            "avg_opr": round(self.average_opr, 1),
            "avg_dpr": round(self.average_dpr, 1),
            "avg_ccwm": round(self.average_ccwm, 1),
            "top_opr": round(self.top_opr, 1),
            "top_dpr": round(self.top_dpr, 1),
            "top_ccwm": round(self.top_ccwm, 1),
        }


def percentile_for_rank(rank: int, team_count: int) -> float:
    if team_count <= 0:
        raise ValueError("team_count must be greater than 0")
    if rank < 1 or rank > team_count:
        raise ValueError(f"rank={rank} outside 1..{team_count}")
    return (team_count - rank + 1) / team_count * 100.0


def performance_category(percentile: float) -> PerformanceCategory:
    if percentile >= 90.0:
        return PerformanceCategory.ELITE
    if percentile >= 75.0:
        return PerformanceCategory.STRONG
    if percentile >= 50.0:
        return PerformanceCategory.AVERAGE
    if percentile >= 25.0:
        return PerformanceCategory.DEVELOPING
    return PerformanceCategory.NEEDS_WORK


def _ranks_by(ratings: Sequence[TeamRating], metric: Callable[[TeamRating], float]) -> dict[int, int]:
    ordered = sorted(ratings, key=lambda rating: (-metric(rating), rating.team_id))
    return {rating.team_id: index for index, rating in enumerate(ordered, start=1)}


def sort_by_opr(ratings: Sequence[TeamRating]) -> list[TeamRating]:
    """OPR descending, team id ascending on ties."""
    return sorted(ratings, key=lambda rating: (-rating.opr, rating.team_id))


def rank_ratings(ratings: Sequence[TeamRating]) -> list[TeamStanding]:
    """Rank every rated team by OPR and attach percentile, category and secondary ranks."""
    if not ratings:
        return []

    team_count = len(ratings)
    dpr_ranks = _ranks_by(ratings, lambda rating: rating.dpr)
    ccwm_ranks = _ranks_by(ratings, lambda rating: rating.ccwm)

    standings: list[TeamStanding] = []
    for rank, rating in enumerate(sort_by_opr(ratings), start=1):
        percentile = percentile_for_rank(rank, team_count)
        standings.append(
            TeamStanding(
                rating=rating,
                rank=rank,
                percentile=percentile,
                dpr_rank=dpr_ranks[rating.team_id],
                ccwm_rank=ccwm_ranks[rating.team_id],
                category=performance_category(percentile),
            )
        )
    return standings


def trend_direction(scores: Sequence[float]) -> TrendDirection:
    """Compare the mean of the second half of a score sequence with the first half."""
    if len(scores) < TREND_MIN_MATCHES:
        return TrendDirection.STABLE

    midpoint = len(scores) // 2
    first_average = fmean(scores[:midpoint])
    second_average = fmean(scores[midpoint:])

    if second_average > first_average * TREND_UP_RATIO:
        return TrendDirection.UP
    if second_average < first_average * TREND_DOWN_RATIO:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def performance_breakdown(scores: Sequence[float], baseline: float) -> PerformanceBreakdown:
    """Bucket alliance scores against a baseline with a band of max(20%, 10 points)."""
    threshold = max(baseline * 0.2, 10.0)
    strong = sum(1 for score in scores if score > baseline + threshold)
    weak = sum(1 for score in scores if score < baseline - threshold)
    return PerformanceBreakdown(
        strong_matches=strong,
        average_matches=len(scores) - strong - weak,
        weak_matches=weak,
        trend=trend_direction(scores),
    )


def generate_insights(opr: float, dpr: float, ccwm: float, percentile: float) -> TeamInsights:
    strengths: list[str] = []
    improvements: list[str] = []

    if opr > 60:
        strengths.append("Excellent offensive scoring ability")
    elif opr > 40:
        strengths.append("Solid offensive contribution")
    elif opr > 20:
        strengths.append("Contributing to alliance scoring")
    else:
        improvements.append("Focus on improving scoring consistency")

    if dpr > 15:
        strengths.append("Strong defensive impact")
    elif dpr > 5:
        strengths.append("Good defensive awareness")
    else:
        improvements.append("Work on defensive positioning and strategy")

    if ccwm > 10:
        strengths.append("Significant positive impact on match outcomes")
    elif ccwm > 0:
        strengths.append("Positive contribution to alliance success")
    else:
        improvements.append("Focus on overall match contribution and consistency")

    if percentile > 80:
        strengths.append("Top-tier performance at this event")
    elif percentile > 60:
        strengths.append("Above-average performance")
    elif percentile < 30:
        improvements.append("Significant room for improvement")

    if not strengths:
        strengths.append("Participating and gaining valuable experience")
    if not improvements:
        improvements.append("Continue building on current strengths")

    return TeamInsights(strengths=tuple(strengths), improvements=tuple(improvements))


def team_match_scores(matches: Sequence[Match], team_id: int) -> list[float]:
    """Alliance scores for the team's eligible matches in match order."""
    scores: list[float] = []
    for match in sorted(matches, key=lambda item: item.key):
        if not is_eligible(match):
            continue
        alliance = match.alliance_of(team_id)
        if alliance == "red":
            scores.append(float(match.red_score))
        elif alliance == "blue":
            scores.append(float(match.blue_score))
    return scores


def summarize_team_matches(matches: Sequence[Match], team_id: int) -> TeamMatchSummary:
    """W/L/T, average and high score and average margin over every completed match."""
    wins = losses = ties = 0
    scores: list[float] = []
    margins: list[float] = []

    for match in matches:
        if not match.has_finite_scores:
            continue
        alliance = match.alliance_of(team_id)
        if alliance is None:
            continue

        own, other = (
            (match.red_score, match.blue_score)
            if alliance == "red"
            else (match.blue_score, match.red_score)
        )
        if own > other:
            wins += 1
        elif own < other:
            losses += 1
        else:
            ties += 1
        scores.append(float(own))
        margins.append(float(own - other))

    return TeamMatchSummary(
        team_id=team_id,
        wins=wins,
        losses=losses,
        ties=ties,
        average_score=fmean(scores) if scores else 0.0,
        high_score=max(scores) if scores else 0.0,
        average_margin=fmean(margins) if margins else 0.0,
    )


def summarize_event(ratings: Sequence[TeamRating]) -> EventSummary:
    if not ratings:
        return EventSummary(
            team_count=0,
            average_opr=0.0,
            average_dpr=0.0,
            average_ccwm=0.0,
            top_opr=0.0,
            top_dpr=0.0,
            top_ccwm=0.0,
        )
    return EventSummary(
        team_count=len(ratings),
        average_opr=fmean(rating.opr for rating in ratings),
        average_dpr=fmean(rating.dpr for rating in ratings),
        average_ccwm=fmean(rating.ccwm for rating in ratings),
        top_opr=max(rating.opr for rating in ratings),
        top_dpr=max(rating.dpr for rating in ratings),
        top_ccwm=max(rating.ccwm for rating in ratings),
    )


__all__ = [
    "EventSummary",
    "PerformanceBreakdown",
    "TeamInsights",
    "TeamMatchSummary",
    "TeamStanding",
    "generate_insights",
    "percentile_for_rank",
    "performance_breakdown",
    "performance_category",
    "rank_ratings",
    "sort_by_opr",
    "summarize_event",
    "summarize_team_matches",
    "team_match_scores",
    "trend_direction",
]
