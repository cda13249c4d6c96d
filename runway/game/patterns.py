# runway/game/patterns.py
"""
Pattern validation and the immutable pattern registry.

A pattern is rejected (never raised) when it is structurally broken, when a
row of it blocks all three lanes with lethal obstacles, or when it places an
obstacle inside the recovery stretch that follows one of its own Palisades.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from runway.game.config import LANES, RECOVERY_ZONE_LENGTH
from runway.game.diagnostics import DiagnosticEvent, Diagnostics
from runway.game.errors import InvalidPatternError
from runway.game.level_config import (
    MAX_PATTERN_DIFFICULTY, MIN_PATTERN_DIFFICULTY, load_json_config,
)
from runway.game.models import (
    ObstacleDefinition, ObstaclePattern, ObstacleType, lane_valid, z_bucket,
)

logger = logging.getLogger(__name__)


def unsolvable_rows(entries: Iterable[Tuple[ObstacleType, int, float]]) -> List[int]:
    """Z-buckets whose entries span every lane with no passable obstacle."""
    rows: Dict[int, List[Tuple[ObstacleType, int]]] = defaultdict(list)
    for otype, lane, z in entries:
        rows[z_bucket(z)].append((otype, lane))
    bad = []
    for bucket, row in rows.items():
        lanes = {lane for _, lane in row}
        if lanes.issuperset(LANES) and not any(t.passable for t, _ in row):
            bad.append(bucket)
    return sorted(bad)


def validate_pattern(pattern: ObstaclePattern) -> None:
    name = pattern.name
    if not name:
        raise InvalidPatternError(name, "empty name")
    if not MIN_PATTERN_DIFFICULTY <= pattern.difficulty <= MAX_PATTERN_DIFFICULTY:
        raise InvalidPatternError(name, f"difficulty {pattern.difficulty} outside "
                                        f"[{MIN_PATTERN_DIFFICULTY}, {MAX_PATTERN_DIFFICULTY}]")
    if not 1 <= pattern.min_level <= pattern.max_level:
        raise InvalidPatternError(name, f"level range [{pattern.min_level}, "
                                        f"{pattern.max_level}] is empty or below 1")
    if pattern.length <= 0:
        raise InvalidPatternError(name, f"length {pattern.length} must be > 0")
    if not pattern.obstacles:
        raise InvalidPatternError(name, "no obstacles")
    for o in pattern.obstacles:
        if not lane_valid(o.lane):
            raise InvalidPatternError(name, f"lane {o.lane!r} not in {LANES}")
        if not 0 <= o.z_offset <= pattern.length:
            raise InvalidPatternError(name, f"z offset {o.z_offset} outside [0, {pattern.length}]")

    bad = unsolvable_rows((o.type, o.lane, o.z_offset) for o in pattern.obstacles)
    if bad:
        raise InvalidPatternError(name, f"unsolvable row at z-bucket {bad[0]}: "
                                        f"all lanes lethal")

    for p in pattern.obstacles:
        if not p.type.triggers_minigame:
            continue
        for o in pattern.obstacles:
            if p.z_offset < o.z_offset <= p.z_offset + RECOVERY_ZONE_LENGTH:
                raise InvalidPatternError(
                    name, f"obstacle at {o.z_offset} inside recovery zone of "
                          f"Palisade at {p.z_offset}")


class PatternLibrary:
    """Read-only registry keyed by name, kept in insertion order."""

    def __init__(self, patterns: Iterable[ObstaclePattern] = (),
                 rejected: Iterable[InvalidPatternError] = ()):
        registry: Dict[str, ObstaclePattern] = {}
        for p in patterns:
            registry[p.name] = p
        self._registry = MappingProxyType(registry)
        self._ordered: Tuple[ObstaclePattern, ...] = tuple(registry.values())
        self.rejected: Tuple[InvalidPatternError, ...] = tuple(rejected)

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[ObstaclePattern]:
        return iter(self._ordered)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._registry)

    def select_candidates(self, level: int, difficulty_min: int,
                          difficulty_max: int) -> Tuple[ObstaclePattern, ...]:
        return tuple(p for p in self._ordered if p.fits(level, difficulty_min, difficulty_max))


def load_patterns(patterns: Iterable[Union[ObstaclePattern, InvalidPatternError]],
                  diagnostics: Optional[Diagnostics] = None) -> PatternLibrary:
    """
    Validate each pattern and build the registry from the survivors.
    InvalidPatternError items (e.g. parse failures) are reported like any other rejection.
    """
    accepted: List[ObstaclePattern] = []
    seen = set()
    rejected: List[InvalidPatternError] = []

    for item in patterns:
        try:
            if isinstance(item, InvalidPatternError):
                raise item
            validate_pattern(item)
            if item.name in seen:
                raise InvalidPatternError(item.name, "duplicate name")
        except InvalidPatternError as err:
            rejected.append(err)
            logger.warning(f"Rejected pattern {err.pattern_name!r}: {err.reason}")
            if diagnostics is not None:
                diagnostics.emit(DiagnosticEvent.PATTERN_REJECTED_UNSOLVABLE,
                                 pattern=err.pattern_name, reason=err.reason)
            continue
        seen.add(item.name)
        accepted.append(item)

    logger.debug(f"Pattern library: {len(accepted)} accepted, {len(rejected)} rejected")
    return PatternLibrary(accepted, rejected)


# ---------------- JSON records ----------------

def pattern_from_dict(raw: Dict[str, Any]) -> ObstaclePattern:
    """Parse one pattern record; any malformed field raises InvalidPatternError."""
    if not isinstance(raw, dict):
        raise InvalidPatternError(None, "pattern record must be an object")
    name = raw.get("name")
    try:
        obstacles = tuple(
            ObstacleDefinition(
                type=ObstacleType.parse(o["type"]),
                lane=o["lane"],
                z_offset=float(o.get("z", o.get("z_offset", o.get("zOffset", 0.0)))),
            )
            for o in raw.get("obstacles", [])
        )
        return ObstaclePattern(
            name=str(name or ""),
            difficulty=int(raw["difficulty"]),
            min_level=int(raw.get("min_level", raw.get("minLevel", 1))),
            max_level=int(raw.get("max_level", raw.get("maxLevel", 1))),
            length=float(raw["length"]),
            obstacles=obstacles,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidPatternError(name, f"malformed record: {e}") from e


def patterns_from_json(path: Path) -> List[Union[ObstaclePattern, InvalidPatternError]]:
    """Reads {"patterns": [...]}; malformed records come back as errors for load_patterns."""
    raw = load_json_config(path)
    records = raw.get("patterns", []) if isinstance(raw, dict) else raw
    out: List[Union[ObstaclePattern, InvalidPatternError]] = []
    for rec in records:
        try:
            out.append(pattern_from_dict(rec))
        except InvalidPatternError as err:
            out.append(err)
    return out


def default_library(diagnostics: Optional[Diagnostics] = None) -> PatternLibrary:
    from runway.game.pattern_catalog import BUILTIN_PATTERNS
    return load_patterns(BUILTIN_PATTERNS, diagnostics)
