"""Per-event analysis pipeline: matches in, ratings, standings and predictions out."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from domain.ratings.analytics import (
    EventSummary,
    PerformanceBreakdown,
    TeamInsights,
    TeamMatchSummary,
    TeamStanding,
    generate_insights,
    performance_breakdown,
    rank_ratings,
    summarize_event,
    summarize_team_matches,
    team_match_scores,
)
from domain.ratings.common import Match, RatingDiagnostics, RatingEstimate
from domain.ratings.opr.calculator import OprParameters, estimate_ratings
from domain.ratings.opr.config import OprSystemConfig
from domain.ratings.prediction import MatchPrediction, PredictionParameters, predict_upcoming

Echo = Callable[[str], None]


@dataclass(frozen=True)
class EventAnalysis:
    """Everything the display layer needs for one event snapshot."""

    system_name: str
    estimate: RatingEstimate
    standings: list[TeamStanding]
    summary: EventSummary
    predictions: list[MatchPrediction]

    @property
    def diagnostics(self) -> RatingDiagnostics:
        return self.estimate.diagnostics

    def standing_for(self, team_id: int) -> TeamStanding | None:
        for standing in self.standings:
            if standing.team_id == team_id:
                return standing
        return None

    def as_dict(self) -> dict[str, Any]:
        return {
            "system": self.system_name,
            "dpr_policy": self.estimate.dpr_policy.value,
            "standings": [standing.as_dict() for standing in self.standings],
            "summary": self.summary.as_dict(),
            "predictions": [prediction.as_dict() for prediction in self.predictions],
            "diagnostics": self.diagnostics.as_dict(),
        }


@dataclass(frozen=True)
class TeamReport:
    standing: TeamStanding
    breakdown: PerformanceBreakdown
    insights: TeamInsights
    record: TeamMatchSummary
    summary: EventSummary
    match_scores: list[float]
    diagnostics: RatingDiagnostics

    @property
    def team_id(self) -> int:
        return self.standing.team_id

    def as_dict(self) -> dict[str, Any]:
        rating = self.standing.rating
        return {
            "team_id": self.team_id,
            "opr": round(rating.opr, 1),
            "dpr": round(rating.dpr, 1),
            "ccwm": round(rating.ccwm, 1),
            "rank": self.standing.rank,
            "percentile": round(self.standing.percentile, 1),
            "matches_analyzed": rating.matches_played,
            "insights": {
                "offensive_rank": self.standing.rank,
                "defensive_rank": self.standing.dpr_rank,
                "consistency_rank": self.standing.ccwm_rank,
                "category": self.standing.category.value,
                "strengths": list(self.insights.strengths),
                "improvements": list(self.insights.improvements),
            },
            "record": {
                "wins": self.record.wins,
                "losses": self.record.losses,
                "ties": self.record.ties,
                "win_rate": round(self.record.win_rate, 1),
                "avg_score": round(self.record.average_score, 1),
                "high_score": self.record.high_score,
                "avg_margin": round(self.record.average_margin, 1),
            },
            "comparison": self.summary.as_dict(),
            "breakdown": {
                "strong_matches": self.breakdown.strong_matches,
                "average_matches": self.breakdown.average_matches,
                "weak_matches": self.breakdown.weak_matches,
                "trend_direction": self.breakdown.trend.value,
            },
            "diagnostics": self.diagnostics.as_dict(),
        }


@dataclass(frozen=True)
class InsufficientData:
    """Returned instead of a report when the team or event has no usable matches."""

    team_id: int | None
    reason: str
    diagnostics: RatingDiagnostics
    available_teams: tuple[int, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "error": "insufficient_data",
            "message": self.reason,
            "available_teams": list(self.available_teams[:10]),
            "total_teams": len(self.available_teams),
            "diagnostics": self.diagnostics.as_dict(),
        }


def analyze_event(
    matches: Sequence[Match],
    *,
    system_config: OprSystemConfig | None = None,
    echo: Echo | None = None,
) -> EventAnalysis:
    """Estimate ratings, rank teams and predict every unplayed match."""
    params = system_config.parameters if system_config is not None else OprParameters()
    prediction_params = (
        system_config.prediction if system_config is not None else PredictionParameters()
    )
    system_name = system_config.name if system_config is not None else "opr_default"

    estimate = estimate_ratings(matches, params)
    _report_estimate(estimate, params=params, system_name=system_name, echo=echo)

    return EventAnalysis(
        system_name=system_name,
        estimate=estimate,
        standings=rank_ratings(estimate.ratings),
        summary=summarize_event(estimate.ratings),
        predictions=predict_upcoming(matches, estimate, prediction_params),
    )


def analyze_team(
    matches: Sequence[Match],
    team_id: int,
    *,
    system_config: OprSystemConfig | None = None,
    echo: Echo | None = None,
) -> TeamReport | InsufficientData:
    """Build one team's report, or explain why there is not enough data for it."""
    analysis = analyze_event(matches, system_config=system_config, echo=echo)
    diagnostics = analysis.diagnostics

    if diagnostics.is_empty:
        return InsufficientData(team_id=team_id, reason=diagnostics.reason or "", diagnostics=diagnostics)

    standing = analysis.standing_for(team_id)
    if standing is None:
        return InsufficientData(
            team_id=team_id,
            reason=f"Team {team_id} has not played any qualification matches at this event.",
            diagnostics=diagnostics,
            available_teams=diagnostics.teams_found,
        )

    scores = team_match_scores(matches, team_id)
    rating = standing.rating
    return TeamReport(
        standing=standing,
        breakdown=performance_breakdown(scores, rating.opr),
        insights=generate_insights(rating.opr, rating.dpr, rating.ccwm, standing.percentile),
        record=summarize_team_matches(matches, team_id),
        summary=analysis.summary,
        match_scores=scores,
        diagnostics=diagnostics,
    )


def _report_estimate(
    estimate: RatingEstimate,
    *,
    params: OprParameters,
    system_name: str,
    echo: Echo | None,
) -> None:
    if echo is None:
        return

    diagnostics = estimate.diagnostics
    echo(
        f"system={system_name} "
        f"dpr_policy={estimate.dpr_policy.value} "
        f"total_matches={diagnostics.total_matches} "
        f"eligible_matches={diagnostics.eligible_matches} "
        f"excluded_playoff={diagnostics.excluded_playoff} "
        f"excluded_incomplete={diagnostics.excluded_incomplete} "
        f"excluded_malformed={diagnostics.excluded_malformed} "
        f"rated_teams={len(estimate)}"
    )
    if diagnostics.is_empty:
        echo(f"[insufficient-data] {diagnostics.reason}")
        return

    if diagnostics.regularization_fraction > params.regularization_warn_fraction:
        echo(
            "[warning] regularized "
            f"{diagnostics.regularized_pivots}/{diagnostics.pivot_count} pivots "
            f"(fraction={diagnostics.regularization_fraction:.3f} "
            f"threshold={params.regularization_warn_fraction:.3f}); "
            "some teams share partners too often for individual attribution"
        )


__all__ = [
    "EventAnalysis",
    "InsufficientData",
    "TeamReport",
    "analyze_event",
    "analyze_team",
]
