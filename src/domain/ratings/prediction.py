"""Expected scores and win probabilities for unplayed matches."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from domain.ratings.common import Match, RatingEstimate, TeamRating, match_label
from domain.ratings.protocol import Confidence, MatchClass


@dataclass(frozen=True)
class PredictionParameters:
    uncertainty: float = 15.0
    min_win_probability: float = 0.05
    max_win_probability: float = 0.95
    high_confidence_matches: int = 5


@dataclass(frozen=True)
class MatchPrediction:
    match_id: int
    red_teams: tuple[int, ...]
    blue_teams: tuple[int, ...]
    predicted_red_score: float
    predicted_blue_score: float
    red_win_probability: float
    blue_win_probability: float
    confidence: Confidence
    match_class: MatchClass = MatchClass.QUALIFICATION
    description: str | None = None
    start_time: datetime | None = None
    series: int = 0

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.match_class.value, self.series, self.match_id)

    @property
    def favored_alliance(self) -> str | None:
        if self.red_win_probability > self.blue_win_probability:
            return "red"
        if self.blue_win_probability > self.red_win_probability:
            return "blue"
        return None

    def as_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "match_key": match_label(self.match_class, self.series, self.match_id),
            "series": self.series,
            "description": self.description,
            "start_time": None if self.start_time is None else self.start_time.isoformat(),
            "match_class": self.match_class.value,
            "red_teams": list(self.red_teams),
            "blue_teams": list(self.blue_teams),
            "predicted_red_score": round(self.predicted_red_score),
            "predicted_blue_score": round(self.predicted_blue_score),
            "red_win_probability": round(self.red_win_probability * 100),
            "blue_win_probability": round(self.blue_win_probability * 100),
            "confidence": self.confidence.value,
        }


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def predicted_alliance_score(
    alliance: Sequence[TeamRating | None],
    opponents: Sequence[TeamRating | None],
) -> float:
    """Sum of own OPR minus opposing DPR, floored at zero. Unrated teams add nothing."""
    offense = sum(rating.opr for rating in alliance if rating is not None)
    defense = sum(rating.dpr for rating in opponents if rating is not None)
    return max(0.0, offense - defense)


def win_probability(
    score: float,
    opponent_score: float,
    params: PredictionParameters | None = None,
) -> float:
    params = params or PredictionParameters()
    raw = 0.5 + (score - opponent_score) / (2.0 * params.uncertainty)
    return clamp(raw, params.min_win_probability, params.max_win_probability)


def prediction_confidence(
    ratings: Sequence[TeamRating | None],
    *,
    rated_team_count: int,
    params: PredictionParameters | None = None,
) -> Confidence:
    """LOW without data or with any unrated team, HIGH once every team has enough matches."""
    params = params or PredictionParameters()
    if rated_team_count == 0 or any(rating is None for rating in ratings):
        return Confidence.LOW
    if all(rating.matches_played >= params.high_confidence_matches for rating in ratings):
        return Confidence.HIGH
    return Confidence.MEDIUM


def predict_match(
    match: Match,
    estimate: RatingEstimate,
    params: PredictionParameters | None = None,
) -> MatchPrediction:
    params = params or PredictionParameters()
    by_team = estimate.by_team()
    red = [by_team.get(team_id) for team_id in match.red_teams]
    blue = [by_team.get(team_id) for team_id in match.blue_teams]

    red_score = predicted_alliance_score(red, blue)
    blue_score = predicted_alliance_score(blue, red)
    red_probability = win_probability(red_score, blue_score, params)

    return MatchPrediction(
        match_id=match.match_id,
        red_teams=match.red_teams,
        blue_teams=match.blue_teams,
        predicted_red_score=red_score,
        predicted_blue_score=blue_score,
        red_win_probability=red_probability,
        blue_win_probability=1.0 - red_probability,
        confidence=prediction_confidence(
            red + blue,
            rated_team_count=len(estimate),
            params=params,
        ),
        match_class=match.match_class,
        description=match.description,
        start_time=match.start_time,
        series=match.series,
    )


def predict_upcoming(
    matches: Sequence[Match],
    estimate: RatingEstimate,
    params: PredictionParameters | None = None,
) -> list[MatchPrediction]:
    """Predict every scheduled, not-yet-completed match with two full alliances."""
    upcoming = sorted(
        (match for match in matches if not match.is_completed and match.has_full_alliances),
        key=lambda match: (match.match_class != MatchClass.QUALIFICATION, match.series, match.match_id),
    )
    return [predict_match(match, estimate, params) for match in upcoming]


__all__ = [
    "MatchPrediction",
    "PredictionParameters",
    "clamp",
    "predict_match",
    "predict_upcoming",
    "predicted_alliance_score",
    "prediction_confidence",
    "win_probability",
]
