"""TOML loading shared by configured rating systems.

Each file in a config directory describes one named system: a ``[system]``
table with its name and description plus the system's own parameter tables.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar
import tomllib

SYSTEM_SECTION = "system"


@dataclass(frozen=True)
class BaseSystemConfig(ABC):
    """Name, description and source file of one configured system."""

    name: str
    description: str | None
    file_path: Path

    @abstractmethod
    def as_config_json(self) -> dict[str, Any]:
        """Tunable parameters as a flat JSON-ready mapping."""


ConfigT = TypeVar("ConfigT", bound=BaseSystemConfig)


def config_files(config_dir: Path) -> list[Path]:
    """Sorted ``*.toml`` files of a config directory."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    files = sorted(config_dir.glob("*.toml"))
    if not files:
        raise ValueError(f"No .toml config files found in: {config_dir}")
    return files


def read_toml(file_path: Path) -> dict[str, Any]:
    try:
        with file_path.open("rb") as file:
            return tomllib.load(file)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"{file_path}: invalid TOML ({exc})") from exc


def load_system_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], ConfigT],
    *,
    label: str,
) -> list[ConfigT]:
    """Parse every config file in a directory; system names must be unique."""
    systems = [parser(read_toml(file_path), file_path) for file_path in config_files(config_dir)]

    first_seen: dict[str, Path] = {}
    for system in systems:
        previous = first_seen.setdefault(system.name, system.file_path)
        if previous != system.file_path:
            raise ValueError(
                f"Duplicate {label} system name '{system.name}' in "
                f"{previous.name} and {system.file_path.name}"
            )
    return systems


def check_sections(raw: dict[str, Any], file_path: Path, sections: Iterable[str]) -> None:
    """Reject unknown top-level keys and sections that are not tables."""
    allowed = {SYSTEM_SECTION, *sections}
    unknown = sorted(key for key in raw if key not in allowed)
    if unknown:
        raise ValueError(f"{file_path}: unknown section(s) {unknown}, expected {sorted(allowed)}")
    for key, value in raw.items():
        if not isinstance(value, dict):
            raise ValueError(f"{file_path}: [{key}] must be a table")


def parse_system_metadata(raw: dict[str, Any], file_path: Path) -> tuple[str, str | None]:
    """Return the required [system].name and optional description."""
    system_raw = raw.get(SYSTEM_SECTION, {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)
    return name, description


__all__ = [
    "BaseSystemConfig",
    "check_sections",
    "config_files",
    "load_system_configs",
    "parse_system_metadata",
    "read_toml",
]
