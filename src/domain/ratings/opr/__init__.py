"""OPR/DPR/CCWM rating modules."""

from domain.ratings.opr.calculator import (
    OprParameters,
    ParticipationSystem,
    build_participation_system,
    estimate_ratings,
    is_eligible,
)
from domain.ratings.opr.config import (
    DEFAULT_CONFIG_DIR,
    OprSystemConfig,
    get_opr_system_config,
    load_opr_system_configs,
)

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "OprParameters",
    "OprSystemConfig",
    "ParticipationSystem",
    "build_participation_system",
    "estimate_ratings",
    "get_opr_system_config",
    "is_eligible",
    "load_opr_system_configs",
]
