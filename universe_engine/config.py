"""Configuration loader for the universe engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
SETTINGS_PATH: Path = DATA_DIR / "engine.yaml"
POINTS_PRESETS_PATH: Path = DATA_DIR / "points_presets.yaml"
DEMO_UNIVERSE_PATH: Path = DATA_DIR / "demo_universe.yaml"

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_DEMO_SECTIONS: tuple[str, ...] = ("universe_id", "season", "teams", "drivers", "race_results")


@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings.

    Attributes:
        database_path: SQLite file used by the command-line tools.
        log_level: Name of the root logging level.
        points_preset: Id of the points preset used to score races.
        rain_seed: Seed for the weather roller, ``None`` for fresh entropy.
    """

    database_path: Path
    log_level: str = "INFO"
    points_preset: str = "2010-present"
    rain_seed: int | None = None

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _read_yaml(path: Path, what: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"{what} file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def load_settings(path: Path | None = None) -> EngineSettings:
    """Load engine settings from YAML.

    A relative ``database_path`` is resolved against the settings file's
    directory.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a field is missing or has an invalid value.
    """
    settings_path = path or SETTINGS_PATH
    data = _read_yaml(settings_path, "Settings") or {}

    if "database_path" not in data:
        raise ValueError("Settings are missing required field 'database_path'")

    db_path = Path(str(data["database_path"]))
    if not db_path.is_absolute():
        db_path = settings_path.parent / db_path

    log_level = str(data.get("log_level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"Settings: 'log_level' must be one of {_LOG_LEVELS}, got {log_level!r}")

    rain_seed = data.get("rain_seed")
    if rain_seed is not None and not isinstance(rain_seed, int):
        raise ValueError(
            f"Settings: 'rain_seed' must be an integer, got {type(rain_seed).__name__}"
        )

    return EngineSettings(
        database_path=db_path,
        log_level=log_level,
        points_preset=str(data.get("points_preset", "2010-present")),
        rain_seed=rain_seed,
    )


def load_points_presets(path: Path | None = None) -> dict[str, list[dict[str, Any]]]:
    """Load the historical points systems.

    Returns:
        Mapping of preset id to its ``[{"position": .., "points": ..}]`` rows.

    Raises:
        FileNotFoundError: If the presets file does not exist.
        ValueError: If a preset or one of its rows is malformed.
    """
    data = _read_yaml(path or POINTS_PRESETS_PATH, "Points presets")
    presets: dict[str, list[dict[str, Any]]] = {}

    for idx, entry in enumerate(data["presets"]):
        preset_id = entry.get("id")
        if not preset_id:
            raise ValueError(f"Points preset {idx} is missing required field 'id'")

        rows = entry.get("rows") or []
        if not rows:
            raise ValueError(f"Points preset {preset_id!r} has no rows")

        for row in rows:
            position, points = row.get("position"), row.get("points")
            if not isinstance(position, int) or position < 1:
                raise ValueError(
                    f"Points preset {preset_id!r}: 'position' must be an integer >= 1, "
                    f"got {position!r}"
                )
            if not isinstance(points, (int, float)) or points < 0:
                raise ValueError(
                    f"Points preset {preset_id!r}: 'points' must be a number >= 0, "
                    f"got {points!r}"
                )

        presets[str(preset_id)] = [
            {"position": int(r["position"]), "points": r["points"]} for r in rows
        ]

    return presets


def load_demo_universe(path: Path | None = None) -> dict[str, Any]:
    """Load the sample universe used by ``main.py``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a top-level section is missing.
    """
    data = _read_yaml(path or DEMO_UNIVERSE_PATH, "Demo universe") or {}
    for section in _DEMO_SECTIONS:
        if section not in data:
            raise ValueError(f"Demo universe is missing required section '{section}'")
    return data
