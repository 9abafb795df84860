"""Tests for the event report command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from event_report import app

runner = CliRunner()


def _team_entries(red: tuple[int, int], blue: tuple[int, int]) -> list[dict]:
    return [
        {"teamNumber": red[0], "station": "Red1"},
        {"teamNumber": red[1], "station": "Red2"},
        {"teamNumber": blue[0], "station": "Blue1"},
        {"teamNumber": blue[1], "station": "Blue2"},
    ]


def _write_matches(tmp_path: Path) -> Path:
    document = {
        "matches": [
            {
                "matchNumber": 1,
                "tournamentLevel": "QUALIFICATION",
                "scoreRedFinal": 50,
                "scoreBlueFinal": 30,
                "teams": _team_entries((4042, 8393), (11506, 16011)),
            },
            {
                "matchNumber": 2,
                "tournamentLevel": "QUALIFICATION",
                "scoreRedFinal": 40,
                "scoreBlueFinal": 45,
                "teams": _team_entries((4042, 11506), (8393, 16011)),
            },
            {
                "matchNumber": 3,
                "tournamentLevel": "QUALIFICATION",
                "teams": _team_entries((8393, 11506), (4042, 16011)),
            },
            "garbage",
        ]
    }
    path = tmp_path / "matches.json"
    path.write_text(json.dumps(document))
    return path


def test_ratings_prints_ranked_teams(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ratings", str(_write_matches(tmp_path))])

    assert result.exit_code == 0
    assert "team=4042" in result.output
    assert "category=Elite" in result.output
    assert "[skipped] payload_index=3" in result.output
    assert "eligible_matches=2" in result.output


def test_ratings_json_output(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ratings", str(_write_matches(tmp_path)), "--json"])

    assert result.exit_code == 0
    assert '"system": "opr_default"' in result.output
    assert '"matrix_size": "4x4"' in result.output


def test_ratings_with_other_system(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["ratings", str(_write_matches(tmp_path)), "--system-name", "opr_residual", "--top-n", "2"],
    )

    assert result.exit_code == 0
    assert "dpr_policy=opr_residual" in result.output
    assert "  3. team=" not in result.output


def test_ratings_unknown_system_is_rejected(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ratings", str(_write_matches(tmp_path)), "--system-name", "nope"])

    assert result.exit_code != 0


def test_ratings_missing_file_is_rejected(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ratings", str(tmp_path / "missing.json")])

    assert result.exit_code != 0


def test_predictions_lists_unplayed_matches(tmp_path: Path) -> None:
    result = runner.invoke(app, ["predictions", str(_write_matches(tmp_path))])

    assert result.exit_code == 0
    assert "match=Q3 " in result.output
    assert "red=8393/11506" in result.output
    assert "match=Q1 " not in result.output


def test_team_report(tmp_path: Path) -> None:
    result = runner.invoke(app, ["team", str(_write_matches(tmp_path)), "--team", "4042"])

    assert result.exit_code == 0
    assert "team=4042 rank=" in result.output
    assert "record=1-1-0" in result.output


def test_team_report_for_unknown_team_exits_nonzero(tmp_path: Path) -> None:
    result = runner.invoke(app, ["team", str(_write_matches(tmp_path)), "--team", "99"])

    assert result.exit_code == 1
    assert "Team 99 has not played any qualification matches" in result.output
    assert "available_teams=[4042, 8393, 11506, 16011]" in result.output


def test_list_configs() -> None:
    result = runner.invoke(app, ["list-configs"])

    assert result.exit_code == 0
    assert "opr_default" in result.output
    assert "opr_residual" in result.output


def test_list_configs_json() -> None:
    result = runner.invoke(app, ["list-configs", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    by_name = {entry["name"]: entry for entry in payload}
    assert by_name["opr_default"]["dpr_policy"] == "opponent_score_residual"
    assert by_name["opr_residual"]["dpr_policy"] == "opr_residual"
    assert by_name["opr_default"]["uncertainty"] == 15.0
