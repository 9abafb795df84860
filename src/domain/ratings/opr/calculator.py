"""Least-squares OPR/DPR/CCWM estimation from alliance scores."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from domain.ratings.common import Match, RatingDiagnostics, RatingEstimate, TeamRating
from domain.ratings.linalg import PIVOT_TOLERANCE, REGULARIZATION, solve_least_squares
from domain.ratings.protocol import DprPolicy, MatchClass


@dataclass(frozen=True)
class OprParameters:
    dpr_policy: DprPolicy = DprPolicy.OPPONENT_SCORE_RESIDUAL
    pivot_tolerance: float = PIVOT_TOLERANCE
    regularization: float = REGULARIZATION
    regularization_warn_fraction: float = 0.05


@dataclass(frozen=True)
class ParticipationSystem:
    """Alliance-row design matrix with own and opposing score vectors."""

    team_ids: tuple[int, ...]
    matrix: np.ndarray
    scores: np.ndarray
    opponent_scores: np.ndarray

    @property
    def shape(self) -> tuple[int, int]:
        rows, cols = self.matrix.shape
        return int(rows), int(cols)


def is_eligible(match: Match) -> bool:
    return (
        match.is_completed
        and match.match_class == MatchClass.QUALIFICATION
        and match.has_full_alliances
        and match.has_finite_scores
    )


def build_participation_system(matches: Sequence[Match]) -> ParticipationSystem:
    """Emit one red row and one blue row per match over sorted team columns.

    Every match is assumed eligible; filter with ``is_eligible`` first.
    """
    team_ids = tuple(sorted({team_id for match in matches for team_id in match.team_ids}))
    team_index = {team_id: index for index, team_id in enumerate(team_ids)}

    matrix = np.zeros((2 * len(matches), len(team_ids)))
    scores = np.zeros(2 * len(matches))
    opponent_scores = np.zeros(2 * len(matches))

    for match_index, match in enumerate(matches):
        red_row = 2 * match_index
        blue_row = red_row + 1
        for team_id in match.red_teams:
            matrix[red_row, team_index[team_id]] = 1.0
        for team_id in match.blue_teams:
            matrix[blue_row, team_index[team_id]] = 1.0
        scores[red_row] = match.red_score
        scores[blue_row] = match.blue_score
        opponent_scores[red_row] = match.blue_score
        opponent_scores[blue_row] = match.red_score

    return ParticipationSystem(
        team_ids=team_ids,
        matrix=matrix,
        scores=scores,
        opponent_scores=opponent_scores,
    )


def estimate_ratings(
    matches: Sequence[Match],
    params: OprParameters | None = None,
) -> RatingEstimate:
    """Estimate OPR, DPR and CCWM for every team in eligible qualification matches.

    Never raises for sparse input: when nothing is eligible the estimate is
    empty and ``diagnostics.reason`` says why.
    """
    params = params or OprParameters()

    eligible: list[Match] = []
    excluded_playoff = 0
    excluded_incomplete = 0
    excluded_malformed = 0
    for match in matches:
        if not match.is_completed:
            excluded_incomplete += 1
        elif match.match_class != MatchClass.QUALIFICATION:
            excluded_playoff += 1
        elif not (match.has_full_alliances and match.has_finite_scores):
            excluded_malformed += 1
        else:
            eligible.append(match)

    counts = {
        "total_matches": len(matches),
        "eligible_matches": len(eligible),
        "excluded_playoff": excluded_playoff,
        "excluded_incomplete": excluded_incomplete,
        "excluded_malformed": excluded_malformed,
    }

    if not eligible:
        reason = (
            "no completed qualification matches with two full alliances "
            f"(total_matches={len(matches)})"
        )
        return RatingEstimate(
            ratings=(),
            diagnostics=RatingDiagnostics(
                **counts,
                sample_match=matches[0] if matches else None,
                reason=reason,
            ),
            dpr_policy=params.dpr_policy,
        )

    system = build_participation_system(eligible)
    opr_solution = solve_least_squares(
        system.matrix,
        system.scores,
        pivot_tolerance=params.pivot_tolerance,
        regularization=params.regularization,
    )
    opr = opr_solution.values
    pivot_count = opr_solution.pivot_count
    regularized_pivots = opr_solution.regularized_pivots

    if params.dpr_policy == DprPolicy.OPR_RESIDUAL:
        dpr_solution = solve_least_squares(
            system.matrix,
            system.opponent_scores,
            pivot_tolerance=params.pivot_tolerance,
            regularization=params.regularization,
        )
        dpr = dpr_solution.values
        pivot_count += dpr_solution.pivot_count
        regularized_pivots += dpr_solution.regularized_pivots
    else:
        dpr = _opponent_score_residual_dpr(system)

    # Alliance rows hold a 1 for each member, so column sums count matches.
    matches_played = system.matrix.sum(axis=0)

    ratings = tuple(
        TeamRating(
            team_id=team_id,
            opr=float(opr[index]),
            dpr=float(dpr[index]),
            ccwm=float(opr[index] - dpr[index]),
            matches_played=int(round(matches_played[index])),
        )
        for index, team_id in enumerate(system.team_ids)
    )

    return RatingEstimate(
        ratings=ratings,
        diagnostics=RatingDiagnostics(
            **counts,
            teams_found=system.team_ids,
            matrix_shape=system.shape,
            sample_match=eligible[0],
            pivot_count=pivot_count,
            regularized_pivots=regularized_pivots,
        ),
        dpr_policy=params.dpr_policy,
    )


def _opponent_score_residual_dpr(system: ParticipationSystem) -> np.ndarray:
    """Points below the event alliance average that a team's opponents scored, floored at zero."""
    event_average = float(system.scores.mean())
    appearances = system.matrix.sum(axis=0)
    opponent_totals = system.matrix.T @ system.opponent_scores
    average_allowed = np.divide(
        opponent_totals,
        appearances,
        out=np.full_like(opponent_totals, event_average),
        where=appearances > 0,
    )
    return np.maximum(0.0, event_average - average_allowed)


__all__ = [
    "OprParameters",
    "ParticipationSystem",
    "build_participation_system",
    "estimate_ratings",
    "is_eligible",
]
