"""Map competition-API match payloads onto canonical ``Match`` records.

Two payload shapes are accepted: the raw API shape, where alliances come from
a ``teams`` list with ``station`` labels, and the flattened dashboard shape
with ``red1``/``red2``/``blue1``/``blue2`` fields. Non-penalty scores are
preferred over final scores when both are present.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from domain.ratings.common import Match
from domain.ratings.protocol import MatchClass

_RED_SCORE_KEYS = ("scoreRedNoFoul", "redScoreNoFoul", "scoreRedFinal", "redScore", "scoreRed")
_BLUE_SCORE_KEYS = ("scoreBlueNoFoul", "blueScoreNoFoul", "scoreBlueFinal", "blueScore", "scoreBlue")
_START_TIME_KEYS = ("actualStartTime", "startTime", "scheduledStartTime", "postResultTime")


@dataclass(frozen=True)
class RejectedPayload:
    index: int
    reason: str


@dataclass(frozen=True)
class MatchParseResult:
    matches: list[Match]
    rejected: list[RejectedPayload]


def _positive_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        return None
    return value


def parse_team_number(value: Any) -> int | None:
    """Return a positive team number, or None for blanks, zeros and junk."""
    return _positive_int(value)


def parse_score(value: Any) -> float | None:
    """Return a finite score; NaN, infinities and junk become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        score = float(value)
    elif isinstance(value, str):
        try:
            score = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return score if math.isfinite(score) else None


def parse_match_class(value: Any) -> MatchClass:
    """Qualification unless the level names something else; missing means qualification."""
    if value is None:
        return MatchClass.QUALIFICATION
    level = str(value).strip().lower()
    if not level or "qual" in level:
        return MatchClass.QUALIFICATION
    return MatchClass.PLAYOFF


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def _first_present(payload: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _alliances_from_stations(teams: Iterable[Any]) -> tuple[tuple[int, ...], tuple[int, ...]]:
    red: list[tuple[str, int]] = []
    blue: list[tuple[str, int]] = []
    for entry in teams:
        if not isinstance(entry, Mapping):
            continue
        station = str(entry.get("station", "")).strip().lower()
        team_number = parse_team_number(entry.get("teamNumber"))
        if team_number is None:
            continue
        if station.startswith("red"):
            red.append((station, team_number))
        elif station.startswith("blue"):
            blue.append((station, team_number))
    return (
        tuple(team for _, team in sorted(red)),
        tuple(team for _, team in sorted(blue)),
    )


def _alliances_from_fields(payload: Mapping[str, Any]) -> tuple[tuple[int, ...], tuple[int, ...]]:
    red = (parse_team_number(payload.get("red1")), parse_team_number(payload.get("red2")))
    blue = (parse_team_number(payload.get("blue1")), parse_team_number(payload.get("blue2")))
    return (
        tuple(team for team in red if team is not None),
        tuple(team for team in blue if team is not None),
    )


def parse_match(payload: Mapping[str, Any]) -> Match:
    """Build a ``Match`` from one payload.

    Missing team slots are left out of the alliance rather than raising, so the
    estimator can count the match as malformed. Raises ``ValueError`` only when
    the payload has no usable match number.
    """
    match_id = _positive_int(payload.get("matchNumber", payload.get("match_id")))
    if match_id is None:
        raise ValueError(f"match payload has no usable matchNumber: {payload.get('matchNumber')!r}")

    teams = payload.get("teams")
    if isinstance(teams, list) and teams:
        red_teams, blue_teams = _alliances_from_stations(teams)
    else:
        red_teams, blue_teams = _alliances_from_fields(payload)

    red_score = parse_score(_first_present(payload, _RED_SCORE_KEYS))
    blue_score = parse_score(_first_present(payload, _BLUE_SCORE_KEYS))
    if payload.get("played") is False:
        red_score = blue_score = None

    description = payload.get("description")
    return Match(
        match_id=match_id,
        red_teams=red_teams,
        blue_teams=blue_teams,
        red_score=red_score,
        blue_score=blue_score,
        match_class=parse_match_class(payload.get("tournamentLevel")),
        description=None if description is None else str(description),
        start_time=_parse_datetime(_first_present(payload, _START_TIME_KEYS)),
        series=_positive_int(payload.get("series")) or 0,
    )


def parse_matches(payloads: Iterable[Any]) -> MatchParseResult:
    """Parse every payload, collecting the ones that cannot become a ``Match``."""
    matches: list[Match] = []
    rejected: list[RejectedPayload] = []
    for index, payload in enumerate(payloads):
        if not isinstance(payload, Mapping):
            rejected.append(RejectedPayload(index=index, reason="payload is not an object"))
            continue
        try:
            matches.append(parse_match(payload))
        except ValueError as exc:
            rejected.append(RejectedPayload(index=index, reason=str(exc)))
    return MatchParseResult(matches=matches, rejected=rejected)


def extract_match_payloads(document: Any) -> list[Any]:
    """Return the match list from a ``{"matches": [...]}`` document or a bare list."""
    if isinstance(document, list):
        return document
    if isinstance(document, Mapping):
        for key in ("matches", "Matches"):
            value = document.get(key)
            if isinstance(value, list):
                return value
        raise ValueError(f"document has no matches list (keys: {sorted(document.keys())})")
    raise ValueError(f"unsupported matches document type: {type(document).__name__}")


__all__ = [
    "MatchParseResult",
    "RejectedPayload",
    "extract_match_payloads",
    "parse_match",
    "parse_match_class",
    "parse_matches",
    "parse_score",
    "parse_team_number",
]
