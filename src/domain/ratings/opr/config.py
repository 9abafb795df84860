"""Load OPR system definitions from TOML files."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.config_base import (
    BaseSystemConfig,
    check_sections,
    load_system_configs,
    parse_system_metadata,
)
from domain.ratings.opr.calculator import OprParameters
from domain.ratings.prediction import PredictionParameters
from domain.ratings.protocol import DprPolicy

ROOT_DIR = Path(__file__).resolve().parents[4]
DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "ratings" / "opr"
OPR_SECTION = "opr"
PREDICTION_SECTION = "prediction"


@dataclass(frozen=True)
class OprSystemConfig(BaseSystemConfig):
    """Configuration for one OPR estimator and its match predictor."""

    parameters: OprParameters
    prediction: PredictionParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "dpr_policy": self.parameters.dpr_policy.value,
            "pivot_tolerance": self.parameters.pivot_tolerance,
            "regularization": self.parameters.regularization,
            "regularization_warn_fraction": self.parameters.regularization_warn_fraction,
            "uncertainty": self.prediction.uncertainty,
            "min_win_probability": self.prediction.min_win_probability,
            "max_win_probability": self.prediction.max_win_probability,
            "high_confidence_matches": self.prediction.high_confidence_matches,
        }


def load_opr_system_configs(config_dir: Path = DEFAULT_CONFIG_DIR) -> list[OprSystemConfig]:
    """Load and validate all OPR system TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_opr_system_config,
        label="opr",
    )


def get_opr_system_config(name: str, config_dir: Path = DEFAULT_CONFIG_DIR) -> OprSystemConfig:
    configs = load_opr_system_configs(config_dir)
    for config in configs:
        if config.name == name:
            return config
    available = ", ".join(config.name for config in configs)
    raise KeyError(f"No OPR system named '{name}' in {config_dir}. Available: {available}")


def _parse_dpr_policy(value: Any, file_path: Path) -> DprPolicy:
    try:
        return DprPolicy(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in DprPolicy)
        raise ValueError(
            f"{file_path}: [opr].dpr_policy must be one of {allowed}, got {value!r}"
        ) from exc


def _parse_opr_system_config(raw: dict[str, Any], file_path: Path) -> OprSystemConfig:
    check_sections(raw, file_path, (OPR_SECTION, PREDICTION_SECTION))
    name, description = parse_system_metadata(raw, file_path)
    opr_raw = raw.get(OPR_SECTION, {})
    prediction_raw = raw.get(PREDICTION_SECTION, {})

    parameters = OprParameters(
        dpr_policy=_parse_dpr_policy(
            opr_raw.get("dpr_policy", DprPolicy.OPPONENT_SCORE_RESIDUAL.value),
            file_path,
        ),
        pivot_tolerance=float(opr_raw.get("pivot_tolerance", 1e-10)),
        regularization=float(opr_raw.get("regularization", 1e-6)),
        regularization_warn_fraction=float(opr_raw.get("regularization_warn_fraction", 0.05)),
    )
    prediction = PredictionParameters(
        uncertainty=float(prediction_raw.get("uncertainty", 15.0)),
        min_win_probability=float(prediction_raw.get("min_win_probability", 0.05)),
        max_win_probability=float(prediction_raw.get("max_win_probability", 0.95)),
        high_confidence_matches=int(prediction_raw.get("high_confidence_matches", 5)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters, prediction=prediction)

    return OprSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
        prediction=prediction,
    )


def _validate_parameters(
    *,
    file_path: Path,
    parameters: OprParameters,
    prediction: PredictionParameters,
) -> None:
    if parameters.pivot_tolerance <= 0.0:
        raise ValueError(f"{file_path}: [opr].pivot_tolerance must be > 0")
    if parameters.regularization <= 0.0:
        raise ValueError(f"{file_path}: [opr].regularization must be > 0")
    if parameters.regularization_warn_fraction < 0.0 or parameters.regularization_warn_fraction > 1.0:
        raise ValueError(f"{file_path}: [opr].regularization_warn_fraction must be between 0 and 1")
    if prediction.uncertainty <= 0.0:
        raise ValueError(f"{file_path}: [prediction].uncertainty must be > 0")
    if not 0.0 < prediction.min_win_probability < 0.5:
        raise ValueError(f"{file_path}: [prediction].min_win_probability must be between 0 and 0.5")
    if not 0.5 < prediction.max_win_probability < 1.0:
        raise ValueError(f"{file_path}: [prediction].max_win_probability must be between 0.5 and 1")
    if not math.isclose(prediction.min_win_probability, 1.0 - prediction.max_win_probability):
        raise ValueError(
            f"{file_path}: [prediction].min_win_probability must equal 1 - max_win_probability, "
            f"got {prediction.min_win_probability} and {prediction.max_win_probability}"
        )
    if prediction.high_confidence_matches < 1:
        raise ValueError(f"{file_path}: [prediction].high_confidence_matches must be >= 1")


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "OprSystemConfig",
    "get_opr_system_config",
    "load_opr_system_configs",
]
