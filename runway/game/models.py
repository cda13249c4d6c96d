# runway/game/models.py
from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from runway.game.config import LANES, Z_BUCKET_SIZE, COLLECTIBLE_HEIGHT


class ObstacleType(str, Enum):
    JUMP = "Jump"
    AVOID = "Avoid"
    PALISADE = "Palisade"
    PYLON = "Pylon"
    BROAD_JUMP = "BroadJump"

    @property
    def passable(self) -> bool:
        """Can be cleared by jumping (or by the minigame, for Palisade)."""
        return self in PASSABLE_TYPES

    @property
    def lethal(self) -> bool:
        return not self.passable

    @property
    def triggers_minigame(self) -> bool:
        return self is ObstacleType.PALISADE

    @classmethod
    def parse(cls, value: Any) -> "ObstacleType":
        """Accepts 'Jump', 'jump', 'ObstacleJump' or an ObstacleType."""
        if isinstance(value, ObstacleType):
            return value
        text = str(value).strip()
        if text.lower().startswith("obstacle"):
            text = text[len("obstacle"):]
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        raise ValueError(f"unknown obstacle type {value!r}")


PASSABLE_TYPES: Tuple[ObstacleType, ...] = (
    ObstacleType.JUMP, ObstacleType.PALISADE, ObstacleType.BROAD_JUMP,
)
LETHAL_TYPES: Tuple[ObstacleType, ...] = (ObstacleType.AVOID, ObstacleType.PYLON)


class Origin(str, Enum):
    PATTERN = "pattern"
    RANDOM = "random"


def z_bucket(z: float) -> int:
    """Row index of a z coordinate; obstacles sharing it form one row."""
    return int(math.floor(z / Z_BUCKET_SIZE))


def lane_valid(lane: Any) -> bool:
    return isinstance(lane, int) and not isinstance(lane, bool) and lane in LANES


@dataclass(frozen=True)
class ObstacleDefinition:
    type: ObstacleType
    lane: int
    z_offset: float


@dataclass(frozen=True)
class ObstaclePattern:
    """Hand-authored obstacle group, placed relative to the runway cursor."""
    name: str
    difficulty: int
    min_level: int
    max_level: int
    length: float
    obstacles: Tuple[ObstacleDefinition, ...] = field(default_factory=tuple)

    def fits(self, level: int, difficulty_min: int, difficulty_max: int) -> bool:
        return (self.min_level <= level <= self.max_level
                and difficulty_min <= self.difficulty <= difficulty_max)

    @property
    def first_offset(self) -> float:
        return min(o.z_offset for o in self.obstacles)

    @property
    def min_lane_gap(self) -> float:
        """Tightest z gap between two obstacles sharing a lane (inf if none do)."""
        by_lane: Dict[int, List[float]] = {}
        for o in self.obstacles:
            by_lane.setdefault(o.lane, []).append(o.z_offset)
        gaps = []
        for zs in by_lane.values():
            zs.sort()
            gaps.extend(b - a for a, b in zip(zs, zs[1:]))
        return min(gaps, default=float("inf"))


@dataclass(frozen=True)
class ObstaclePlacement:
    """An obstacle at an absolute runway position. Also serves as the tracker's record."""
    type: ObstacleType
    lane: int
    z: float
    origin: Origin = Origin.RANDOM
    pattern_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "obstacle",
            "type": self.type.value,
            "lane": self.lane,
            "z": round(self.z, 4),
            "origin": self.origin.value,
            "pattern": self.pattern_name,
        }


@dataclass(frozen=True)
class CollectiblePlacement:
    lane: int
    z: float
    is_mega: bool
    point_value: int
    height: float = COLLECTIBLE_HEIGHT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "collectible",
            "lane": self.lane,
            "z": round(self.z, 4),
            "mega": self.is_mega,
            "points": self.point_value,
            "height": round(self.height, 4),
        }


@dataclass(frozen=True)
class Emission:
    """Result of one scheduler tick."""
    origin: Origin
    placements: Tuple[ObstaclePlacement, ...]
    cursor_z: float
    pattern_name: Optional[str] = None
