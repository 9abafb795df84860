#!/usr/bin/env python3
"""Event OPR reports from a downloaded competition-API matches document."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.pipeline import InsufficientData, analyze_event, analyze_team
from domain.ratings.common import Match, match_label
from domain.ratings.match_adapter import extract_match_payloads, parse_matches
from domain.ratings.opr.config import (
    DEFAULT_CONFIG_DIR,
    OprSystemConfig,
    get_opr_system_config,
    load_opr_system_configs,
)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="OPR/DPR/CCWM ratings, standings and predictions for one event.",
)

MatchesFile = Annotated[
    Path,
    typer.Argument(help="JSON file holding the event's matches ({\"matches\": [...]} or a list)."),
]
SystemName = Annotated[
    str,
    typer.Option("--system-name", help="OPR system name from the config directory."),
]
ConfigDir = Annotated[
    Path,
    typer.Option("--config-dir", help="Directory of OPR system TOML configs."),
]
AsJson = Annotated[
    bool,
    typer.Option("--json", help="Print the report as JSON instead of a table."),
]


def load_matches_file(path: Path) -> list[Match]:
    """Read a matches document and parse it, reporting rejected payloads."""
    if not path.is_file():
        raise typer.BadParameter(f"matches file not found: {path}", param_hint="MATCHES_FILE")
    try:
        document = json.loads(path.read_text())
        payloads = extract_match_payloads(document)
    except (json.JSONDecodeError, ValueError) as exc:
        raise typer.BadParameter(f"{path}: {exc}", param_hint="MATCHES_FILE") from exc

    result = parse_matches(payloads)
    for rejected in result.rejected:
        typer.echo(f"[skipped] payload_index={rejected.index} reason={rejected.reason}", err=True)
    return result.matches


def resolve_system(system_name: str, config_dir: Path) -> OprSystemConfig:
    try:
        return get_opr_system_config(system_name, config_dir)
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0]), param_hint="--system-name") from exc
    except (FileNotFoundError, NotADirectoryError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-dir") from exc


def _echo_stderr(message: str) -> None:
    typer.echo(message, err=True)


@app.command()
def ratings(
    matches_file: MatchesFile,
    system_name: SystemName = "opr_default",
    config_dir: ConfigDir = DEFAULT_CONFIG_DIR,
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of teams to print. Use 0 for all teams."),
    ] = 0,
    as_json: AsJson = False,
) -> None:
    """Print teams ranked by OPR with DPR, CCWM, percentile and category."""
    if top_n < 0:
        raise typer.BadParameter("--top-n must be >= 0")

    system = resolve_system(system_name, config_dir)
    analysis = analyze_event(load_matches_file(matches_file), system_config=system, echo=_echo_stderr)

    if as_json:
        typer.echo(json.dumps(analysis.as_dict(), indent=2))
        return

    if not analysis.standings:
        typer.echo(f"No ratings: {analysis.diagnostics.reason}")
        return

    standings = analysis.standings[:top_n] if top_n else analysis.standings
    for standing in standings:
        rating = standing.rating
        typer.echo(
            f"{standing.rank:3d}. team={rating.team_id:<6d} "
            f"opr={rating.opr:7.2f} dpr={rating.dpr:7.2f} ccwm={rating.ccwm:7.2f} "
            f"matches={rating.matches_played:2d} "
            f"percentile={standing.percentile:5.1f} category={standing.category.value}"
        )


@app.command()
def predictions(
    matches_file: MatchesFile,
    system_name: SystemName = "opr_default",
    config_dir: ConfigDir = DEFAULT_CONFIG_DIR,
    as_json: AsJson = False,
) -> None:
    """Predict scores and win probabilities for matches without results."""
    system = resolve_system(system_name, config_dir)
    analysis = analyze_event(load_matches_file(matches_file), system_config=system, echo=_echo_stderr)

    if as_json:
        typer.echo(json.dumps([item.as_dict() for item in analysis.predictions], indent=2))
        return

    if not analysis.predictions:
        typer.echo("No unplayed matches to predict.")
        return

    for prediction in analysis.predictions:
        red = "/".join(str(team) for team in prediction.red_teams)
        blue = "/".join(str(team) for team in prediction.blue_teams)
        label = match_label(prediction.match_class, prediction.series, prediction.match_id)
        typer.echo(
            f"match={label:<6} red={red:<12} blue={blue:<12} "
            f"score={prediction.predicted_red_score:6.1f}-{prediction.predicted_blue_score:<6.1f} "
            f"red_win={prediction.red_win_probability:4.0%} "
            f"blue_win={prediction.blue_win_probability:4.0%} "
            f"confidence={prediction.confidence.value}"
        )


@app.command()
def team(
    matches_file: MatchesFile,
    team_number: Annotated[int, typer.Option("--team", help="Team number to report on.")],
    system_name: SystemName = "opr_default",
    config_dir: ConfigDir = DEFAULT_CONFIG_DIR,
    as_json: AsJson = False,
) -> None:
    """Print one team's ratings, insights, record and scoring trend."""
    if team_number <= 0:
        raise typer.BadParameter("--team must be greater than 0")

    system = resolve_system(system_name, config_dir)
    report = analyze_team(
        load_matches_file(matches_file),
        team_number,
        system_config=system,
        echo=_echo_stderr,
    )

    if as_json:
        typer.echo(json.dumps(report.as_dict(), indent=2))
        if isinstance(report, InsufficientData):
            raise typer.Exit(code=1)
        return

    if isinstance(report, InsufficientData):
        typer.echo(report.reason)
        if report.available_teams:
            typer.echo(f"available_teams={list(report.available_teams[:10])} total={len(report.available_teams)}")
        raise typer.Exit(code=1)

    rating = report.standing.rating
    typer.echo(
        f"team={report.team_id} rank={report.standing.rank} "
        f"percentile={report.standing.percentile:.1f} category={report.standing.category.value}"
    )
    typer.echo(f"opr={rating.opr:.1f} dpr={rating.dpr:.1f} ccwm={rating.ccwm:.1f} matches={rating.matches_played}")
    typer.echo(
        f"record={report.record.wins}-{report.record.losses}-{report.record.ties} "
        f"avg_score={report.record.average_score:.1f} high_score={report.record.high_score:.0f} "
        f"avg_margin={report.record.average_margin:+.1f}"
    )
    typer.echo(
        f"breakdown strong={report.breakdown.strong_matches} "
        f"average={report.breakdown.average_matches} weak={report.breakdown.weak_matches} "
        f"trend={report.breakdown.trend.value}"
    )
    for strength in report.insights.strengths:
        typer.echo(f"+ {strength}")
    for improvement in report.insights.improvements:
        typer.echo(f"- {improvement}")


@app.command()
def list_configs(config_dir: ConfigDir = DEFAULT_CONFIG_DIR, as_json: AsJson = False) -> None:
    """Print every OPR system config found in the config directory."""
    try:
        configs = load_opr_system_configs(config_dir)
    except (FileNotFoundError, NotADirectoryError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-dir") from exc

    if as_json:
        payload = [
            {"name": config.name, "description": config.description, **config.as_config_json()}
            for config in configs
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    for config in configs:
        typer.echo(
            f"{config.name} file={config.file_path.name} "
            f"dpr_policy={config.parameters.dpr_policy.value} "
            f"uncertainty={config.prediction.uncertainty}"
        )


if __name__ == "__main__":
    app()
