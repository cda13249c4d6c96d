# runway/game/level_config.py
"""
Per-level tuning: one frozen LevelConfiguration per rung of the ladder.

Values are validated when the object is built; a bad value raises
ConfigurationError and the level refuses to load.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from runway.game.config import GLOBAL_MAX_EFFECTIVE_SPEED, MIN_COLLECTIBLE_OBSTACLE_DISTANCE
from runway.game.errors import ConfigurationError

logger = logging.getLogger(__name__)

MIN_PATTERN_DIFFICULTY = 1
MAX_PATTERN_DIFFICULTY = 10


@dataclass(frozen=True)
class LevelConfiguration:
    level_number: int
    level_duration: float
    min_obstacle_spacing: float
    max_obstacle_spacing: float
    avoid_obstacle_probability: float
    min_collectible_spacing: float
    max_collectible_spacing: float
    collectible_line_bias: float
    collectible_above_obstacle_chance: float
    mega_collectible_spawn_ratio: float
    mega_collectible_point_value: int
    speed_multiplier: float
    max_effective_speed: float
    min_pattern_difficulty: int
    max_pattern_difficulty: int
    pattern_usage_ratio: float
    min_collectible_obstacle_distance: float = MIN_COLLECTIBLE_OBSTACLE_DISTANCE
    level_name: str = ""

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        name = f"level {self.level_number}"
        if self.level_number < 1:
            raise ConfigurationError(f"{name}: level_number must be >= 1")
        if self.level_duration <= 0:
            raise ConfigurationError(f"{name}: level_duration must be > 0")
        if not 0 < self.max_effective_speed <= GLOBAL_MAX_EFFECTIVE_SPEED:
            raise ConfigurationError(
                f"{name}: max_effective_speed {self.max_effective_speed} "
                f"outside (0, {GLOBAL_MAX_EFFECTIVE_SPEED}]")
        if self.speed_multiplier <= 0:
            raise ConfigurationError(f"{name}: speed_multiplier must be > 0")
        if not 0 < self.min_obstacle_spacing <= self.max_obstacle_spacing:
            raise ConfigurationError(
                f"{name}: obstacle spacing needs 0 < min <= max, got "
                f"[{self.min_obstacle_spacing}, {self.max_obstacle_spacing}]")
        if not 0 < self.min_collectible_spacing <= self.max_collectible_spacing:
            raise ConfigurationError(
                f"{name}: collectible spacing needs 0 < min <= max, got "
                f"[{self.min_collectible_spacing}, {self.max_collectible_spacing}]")
        for ratio in ("avoid_obstacle_probability", "collectible_line_bias",
                      "collectible_above_obstacle_chance", "mega_collectible_spawn_ratio",
                      "pattern_usage_ratio"):
            value = getattr(self, ratio)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name}: {ratio}={value} outside [0, 1]")
        if self.mega_collectible_point_value < 1:
            raise ConfigurationError(f"{name}: mega_collectible_point_value must be >= 1")
        if self.min_collectible_obstacle_distance < 0:
            raise ConfigurationError(f"{name}: min_collectible_obstacle_distance must be >= 0")
        lo, hi = self.min_pattern_difficulty, self.max_pattern_difficulty
        if not (MIN_PATTERN_DIFFICULTY <= lo <= hi <= MAX_PATTERN_DIFFICULTY):
            raise ConfigurationError(
                f"{name}: pattern difficulty range [{lo}, {hi}] must satisfy "
                f"{MIN_PATTERN_DIFFICULTY} <= min <= max <= {MAX_PATTERN_DIFFICULTY}")

    @property
    def pattern_difficulty_midpoint(self) -> float:
        return (self.min_pattern_difficulty + self.max_pattern_difficulty) / 2.0

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "LevelConfiguration":
        """Build from snake_case or camelCase keys (camelCase matches exported level assets)."""
        if not isinstance(raw, dict):
            raise ConfigurationError(f"level entry must be an object, got {type(raw).__name__}")
        kwargs: Dict[str, Any] = {}
        for f in fields(LevelConfiguration):
            camel = _camel(f.name)
            if f.name in raw:
                value = raw[f.name]
            elif camel in raw:
                value = raw[camel]
            elif f.name in _OPTIONAL:
                continue
            else:
                raise ConfigurationError(f"level entry missing {f.name!r}")
            kwargs[f.name] = _coerce(f.name, value)
        return LevelConfiguration(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_OPTIONAL = {"min_collectible_obstacle_distance", "level_name"}
_INT_FIELDS = {"level_number", "mega_collectible_point_value",
               "min_pattern_difficulty", "max_pattern_difficulty"}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


def _coerce(name: str, value: Any) -> Any:
    if name == "level_name":
        return str(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if name in _INT_FIELDS:
        if int(value) != value:
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        return int(value)
    return float(value)


# Nine-rung ladder. Reaction time (min spacing / max speed) stays >= 0.25 s on every rung.
DEFAULT_LEVELS: List[Dict[str, Any]] = [
    dict(level_number=1, level_name="Warm Up", level_duration=60.0,
         min_obstacle_spacing=18.0, max_obstacle_spacing=28.0, avoid_obstacle_probability=0.20,
         min_collectible_spacing=6.0, max_collectible_spacing=14.0, collectible_line_bias=0.70,
         collectible_above_obstacle_chance=0.35, mega_collectible_spawn_ratio=0.03,
         mega_collectible_point_value=50, speed_multiplier=1.0, max_effective_speed=20.0,
         min_pattern_difficulty=1, max_pattern_difficulty=3, pattern_usage_ratio=0.30),
    dict(level_number=2, level_name="Stride", level_duration=60.0,
         min_obstacle_spacing=17.0, max_obstacle_spacing=26.0, avoid_obstacle_probability=0.25,
         min_collectible_spacing=6.0, max_collectible_spacing=14.0, collectible_line_bias=0.70,
         collectible_above_obstacle_chance=0.33, mega_collectible_spawn_ratio=0.04,
         mega_collectible_point_value=50, speed_multiplier=1.1, max_effective_speed=22.0,
         min_pattern_difficulty=1, max_pattern_difficulty=4, pattern_usage_ratio=0.35),
    dict(level_number=3, level_name="Switchback", level_duration=70.0,
         min_obstacle_spacing=16.0, max_obstacle_spacing=25.0, avoid_obstacle_probability=0.30,
         min_collectible_spacing=5.0, max_collectible_spacing=13.0, collectible_line_bias=0.68,
         collectible_above_obstacle_chance=0.30, mega_collectible_spawn_ratio=0.04,
         mega_collectible_point_value=50, speed_multiplier=1.2, max_effective_speed=24.0,
         min_pattern_difficulty=2, max_pattern_difficulty=5, pattern_usage_ratio=0.40),
    dict(level_number=4, level_name="Crosswind", level_duration=70.0,
         min_obstacle_spacing=15.0, max_obstacle_spacing=24.0, avoid_obstacle_probability=0.35,
         min_collectible_spacing=5.0, max_collectible_spacing=13.0, collectible_line_bias=0.66,
         collectible_above_obstacle_chance=0.30, mega_collectible_spawn_ratio=0.05,
         mega_collectible_point_value=60, speed_multiplier=1.3, max_effective_speed=26.0,
         min_pattern_difficulty=3, max_pattern_difficulty=6, pattern_usage_ratio=0.45),
    dict(level_number=5, level_name="Midway", level_duration=80.0,
         min_obstacle_spacing=14.0, max_obstacle_spacing=22.0, avoid_obstacle_probability=0.40,
         min_collectible_spacing=5.0, max_collectible_spacing=12.0, collectible_line_bias=0.65,
         collectible_above_obstacle_chance=0.28, mega_collectible_spawn_ratio=0.05,
         mega_collectible_point_value=60, speed_multiplier=1.4, max_effective_speed=28.0,
         min_pattern_difficulty=4, max_pattern_difficulty=7, pattern_usage_ratio=0.50),
    dict(level_number=6, level_name="Fast Lane", level_duration=80.0,
         min_obstacle_spacing=13.0, max_obstacle_spacing=21.0, avoid_obstacle_probability=0.45,
         min_collectible_spacing=4.0, max_collectible_spacing=12.0, collectible_line_bias=0.62,
         collectible_above_obstacle_chance=0.25, mega_collectible_spawn_ratio=0.06,
         mega_collectible_point_value=75, speed_multiplier=1.5, max_effective_speed=31.0,
         min_pattern_difficulty=5, max_pattern_difficulty=8, pattern_usage_ratio=0.55),
    dict(level_number=7, level_name="Overdrive", level_duration=90.0,
         min_obstacle_spacing=12.0, max_obstacle_spacing=20.0, avoid_obstacle_probability=0.50,
         min_collectible_spacing=4.0, max_collectible_spacing=11.0, collectible_line_bias=0.60,
         collectible_above_obstacle_chance=0.25, mega_collectible_spawn_ratio=0.06,
         mega_collectible_point_value=75, speed_multiplier=1.6, max_effective_speed=34.0,
         min_pattern_difficulty=6, max_pattern_difficulty=9, pattern_usage_ratio=0.60),
    dict(level_number=8, level_name="Gauntlet", level_duration=90.0,
         min_obstacle_spacing=11.0, max_obstacle_spacing=19.0, avoid_obstacle_probability=0.55,
         min_collectible_spacing=4.0, max_collectible_spacing=11.0, collectible_line_bias=0.58,
         collectible_above_obstacle_chance=0.22, mega_collectible_spawn_ratio=0.07,
         mega_collectible_point_value=100, speed_multiplier=1.8, max_effective_speed=38.0,
         min_pattern_difficulty=7, max_pattern_difficulty=10, pattern_usage_ratio=0.65),
    dict(level_number=9, level_name="Final Run", level_duration=100.0,
         min_obstacle_spacing=10.0, max_obstacle_spacing=18.0, avoid_obstacle_probability=0.60,
         min_collectible_spacing=4.0, max_collectible_spacing=10.0, collectible_line_bias=0.55,
         collectible_above_obstacle_chance=0.20, mega_collectible_spawn_ratio=0.08,
         mega_collectible_point_value=100, speed_multiplier=2.0, max_effective_speed=40.0,
         min_pattern_difficulty=8, max_pattern_difficulty=10, pattern_usage_ratio=0.70),
]


def build_level_table(entries: Iterable[Dict[str, Any]]) -> Dict[int, LevelConfiguration]:
    table: Dict[int, LevelConfiguration] = {}
    for raw in entries:
        cfg = LevelConfiguration.from_dict(raw)
        if cfg.level_number in table:
            raise ConfigurationError(f"duplicate level_number {cfg.level_number}")
        table[cfg.level_number] = cfg
    if not table:
        raise ConfigurationError("level table is empty")
    return dict(sorted(table.items()))


def default_level_table() -> Dict[int, LevelConfiguration]:
    return build_level_table(DEFAULT_LEVELS)


def load_json_config(path: Path) -> Dict[str, Any]:
    """Load a JSON file or raise ConfigurationError with the parse position."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"{path} is not valid JSON (line {e.lineno}, col {e.colno}): {e.msg}") from e


def load_level_table(path: Path) -> Dict[int, LevelConfiguration]:
    """Reads {"levels": [...]} or a bare list of level objects."""
    raw = load_json_config(path)
    entries = raw.get("levels") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ConfigurationError(f"{path}: expected a list of levels")
    table = build_level_table(entries)
    logger.info(f"Loaded {len(table)} levels from {path}")
    return table


def level_config(level_number: int,
                 table: Optional[Dict[int, LevelConfiguration]] = None) -> LevelConfiguration:
    """Config for a level; numbers past either end of the ladder clamp to it."""
    table = table if table is not None else default_level_table()
    numbers = sorted(table)
    clamped = min(max(int(level_number), numbers[0]), numbers[-1])
    if clamped != level_number:
        logger.warning(f"Level {level_number} not in ladder, using level {clamped}")
    if clamped not in table:
        # gaps in a custom ladder: fall back to the nearest lower rung
        clamped = max(n for n in numbers if n <= clamped)
    return table[clamped]
