"""Tests for standings, percentiles, trends and descriptive statistics."""

from __future__ import annotations

import pytest

from domain.ratings.analytics import (
    generate_insights,
    percentile_for_rank,
    performance_breakdown,
    performance_category,
    rank_ratings,
    sort_by_opr,
    summarize_event,
    summarize_team_matches,
    team_match_scores,
    trend_direction,
)
from domain.ratings.common import Match, TeamRating
from domain.ratings.protocol import MatchClass, PerformanceCategory, TrendDirection


def _rating(team_id: int, opr: float, dpr: float = 0.0, matches_played: int = 5) -> TeamRating:
    return TeamRating(
        team_id=team_id,
        opr=opr,
        dpr=dpr,
        ccwm=opr - dpr,
        matches_played=matches_played,
    )


def _match(
    match_id: int,
    red: tuple[int, ...],
    blue: tuple[int, ...],
    red_score: float | None,
    blue_score: float | None,
    match_class: MatchClass = MatchClass.QUALIFICATION,
) -> Match:
    return Match(
        match_id=match_id,
        red_teams=red,
        blue_teams=blue,
        red_score=red_score,
        blue_score=blue_score,
        match_class=match_class,
    )


def test_rank_ratings_orders_by_opr_and_sets_percentile_bounds() -> None:
    ratings = [_rating(10, 20.0), _rating(20, 55.0), _rating(30, 35.0), _rating(40, 5.0)]

    standings = rank_ratings(ratings)

    assert [standing.team_id for standing in standings] == [20, 30, 10, 40]
    assert [standing.rank for standing in standings] == [1, 2, 3, 4]
    assert standings[0].percentile == 100.0
    assert standings[-1].percentile == pytest.approx(100.0 / 4)
    assert standings[1].percentile == pytest.approx(75.0)


def test_rank_ratings_breaks_ties_by_team_id() -> None:
    standings = rank_ratings([_rating(300, 25.0), _rating(100, 25.0), _rating(200, 25.0)])
    assert [standing.team_id for standing in standings] == [100, 200, 300]
    assert sort_by_opr([_rating(2, 1.0), _rating(1, 1.0)])[0].team_id == 1


def test_rank_ratings_assigns_dpr_and_ccwm_ranks() -> None:
    ratings = [
        _rating(1, opr=40.0, dpr=2.0),
        _rating(2, opr=30.0, dpr=12.0),
        _rating(3, opr=20.0, dpr=8.0),
    ]

    standings = {standing.team_id: standing for standing in rank_ratings(ratings)}

    assert standings[2].dpr_rank == 1
    assert standings[3].dpr_rank == 2
    assert standings[1].dpr_rank == 3
    # ccwm: 38, 18, 12
    assert standings[1].ccwm_rank == 1
    assert standings[2].ccwm_rank == 2
    assert standings[3].ccwm_rank == 3


def test_rank_ratings_of_nothing_is_empty() -> None:
    assert rank_ratings([]) == []


def test_single_team_is_top_percentile() -> None:
    standings = rank_ratings([_rating(7, 12.0)])
    assert standings[0].percentile == 100.0
    assert standings[0].category == PerformanceCategory.ELITE


def test_percentile_for_rank_validates_input() -> None:
    assert percentile_for_rank(1, 10) == 100.0
    assert percentile_for_rank(10, 10) == pytest.approx(10.0)
    with pytest.raises(ValueError):
        percentile_for_rank(0, 10)
    with pytest.raises(ValueError):
        percentile_for_rank(1, 0)


@pytest.mark.parametrize(
    ("percentile", "expected"),
    [
        (100.0, PerformanceCategory.ELITE),
        (90.0, PerformanceCategory.ELITE),
        (89.9, PerformanceCategory.STRONG),
        (75.0, PerformanceCategory.STRONG),
        (74.9, PerformanceCategory.AVERAGE),
        (50.0, PerformanceCategory.AVERAGE),
        (49.9, PerformanceCategory.DEVELOPING),
        (25.0, PerformanceCategory.DEVELOPING),
        (24.9, PerformanceCategory.NEEDS_WORK),
        (0.0, PerformanceCategory.NEEDS_WORK),
    ],
)
def test_performance_category_thresholds(percentile: float, expected: PerformanceCategory) -> None:
    assert performance_category(percentile) == expected


def test_trend_needs_four_matches() -> None:
    assert trend_direction([]) == TrendDirection.STABLE
    assert trend_direction([10.0, 50.0, 90.0]) == TrendDirection.STABLE


def test_trend_up_down_and_stable() -> None:
    assert trend_direction([10.0, 10.0, 20.0, 20.0]) == TrendDirection.UP
    assert trend_direction([20.0, 20.0, 10.0, 10.0]) == TrendDirection.DOWN
    assert trend_direction([10.0, 11.0, 10.0, 11.0]) == TrendDirection.STABLE


def test_trend_uses_floor_midpoint_for_odd_lengths() -> None:
    # First half [10, 10] -> 10, second half [10, 20, 20] -> 16.7.
    assert trend_direction([10.0, 10.0, 10.0, 20.0, 20.0]) == TrendDirection.UP


def test_trend_within_fifteen_percent_is_stable() -> None:
    assert trend_direction([100.0, 100.0, 114.0, 114.0]) == TrendDirection.STABLE
    assert trend_direction([100.0, 100.0, 86.0, 86.0]) == TrendDirection.STABLE


def test_performance_breakdown_uses_ten_point_floor() -> None:
    breakdown = performance_breakdown([55.0, 45.0, 25.0, 50.5, 29.0], baseline=40.0)

    assert breakdown.strong_matches == 2
    assert breakdown.weak_matches == 2
    assert breakdown.average_matches == 1
    assert breakdown.trend == TrendDirection.DOWN


def test_performance_breakdown_scales_band_with_baseline() -> None:
    # 20% of 100 is wider than the 10 point floor.
    breakdown = performance_breakdown([115.0, 125.0, 85.0, 75.0], baseline=100.0)
    assert breakdown.strong_matches == 1
    assert breakdown.weak_matches == 1
    assert breakdown.average_matches == 2


def test_generate_insights_for_strong_team() -> None:
    insights = generate_insights(opr=65.0, dpr=20.0, ccwm=45.0, percentile=95.0)

    assert insights.strengths == (
        "Excellent offensive scoring ability",
        "Strong defensive impact",
        "Significant positive impact on match outcomes",
        "Top-tier performance at this event",
    )
    assert insights.improvements == ("Continue building on current strengths",)


def test_generate_insights_for_struggling_team() -> None:
    insights = generate_insights(opr=10.0, dpr=0.0, ccwm=-5.0, percentile=20.0)

    assert insights.strengths == ("Participating and gaining valuable experience",)
    assert insights.improvements == (
        "Focus on improving scoring consistency",
        "Work on defensive positioning and strategy",
        "Focus on overall match contribution and consistency",
        "Significant room for improvement",
    )


def test_team_match_scores_are_chronological_and_eligible_only() -> None:
    matches = [
        _match(3, (1, 2), (3, 4), 70, 20),
        _match(1, (3, 4), (1, 2), 15, 40),
        _match(2, (1, 5), (3, 4), 55, 25, match_class=MatchClass.PLAYOFF),
        _match(4, (1, 2), (3, 4), None, None),
        _match(5, (2, 3), (4, 5), 30, 35),
    ]

    assert team_match_scores(matches, 1) == [40.0, 70.0]
    assert team_match_scores(matches, 5) == [35.0]
    assert team_match_scores(matches, 99) == []


def test_summarize_team_matches_counts_record_and_margins() -> None:
    matches = [
        _match(1, (1, 2), (3, 4), 50, 30),
        _match(2, (3, 1), (2, 4), 20, 45),
        _match(3, (1, 4), (2, 3), 40, 40),
        _match(4, (1, 2), (3, 4), None, None),
        _match(5, (2, 3), (4, 5), 30, 35),
    ]

    summary = summarize_team_matches(matches, 1)

    assert (summary.wins, summary.losses, summary.ties) == (1, 1, 1)
    assert summary.played == 3
    assert summary.average_score == pytest.approx((50 + 20 + 40) / 3)
    assert summary.high_score == 50.0
    assert summary.average_margin == pytest.approx((20 - 25 + 0) / 3)
    assert summary.win_rate == pytest.approx(100.0 / 3)


def test_summarize_team_matches_without_matches() -> None:
    summary = summarize_team_matches([], 1)
    assert summary.played == 0
    assert summary.win_rate == 0.0
    assert summary.average_score == 0.0


def test_summarize_event() -> None:
    summary = summarize_event([_rating(1, 30.0, 5.0), _rating(2, 10.0, 15.0)])

    assert summary.team_count == 2
    assert summary.average_opr == pytest.approx(20.0)
    assert summary.average_dpr == pytest.approx(10.0)
    assert summary.average_ccwm == pytest.approx(10.0)
    assert summary.top_opr == pytest.approx(30.0)
    assert summary.top_dpr == pytest.approx(15.0)
    assert summary.top_ccwm == pytest.approx(25.0)
    assert summarize_event([]).team_count == 0


def test_record_skips_non_finite_scores() -> None:
    matches = [
        _match(1, (1, 2), (3, 4), 50, 30),
        _match(2, (1, 3), (2, 4), float("nan"), 45),
    ]

    summary = summarize_team_matches(matches, 1)

    assert summary.played == 1
    assert summary.average_score == pytest.approx(50.0)
