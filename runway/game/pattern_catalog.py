# runway/game/pattern_catalog.py
from __future__ import annotations
from typing import Iterable, Tuple

from runway.game.models import ObstacleDefinition, ObstaclePattern, ObstacleType

J = ObstacleType.JUMP
A = ObstacleType.AVOID
P = ObstacleType.PALISADE
Y = ObstacleType.PYLON
B = ObstacleType.BROAD_JUMP


def _pattern(name: str, difficulty: int, levels: Tuple[int, int], length: float,
             obstacles: Iterable[Tuple[ObstacleType, int, float]]) -> ObstaclePattern:
    return ObstaclePattern(
        name=name,
        difficulty=difficulty,
        min_level=levels[0],
        max_level=levels[1],
        length=length,
        obstacles=tuple(ObstacleDefinition(t, lane, z) for t, lane, z in obstacles),
    )


# (type, lane, z offset); easy first, then by difficulty.
# Same-lane gaps stay at or above the minimum spacing of each pattern's lowest level.
BUILTIN_PATTERNS: Tuple[ObstaclePattern, ...] = (
    _pattern("Center Hurdles", 1, (1, 3), 30.0, [(J, 0, 0.0), (J, 0, 18.0)]),
    _pattern("Easy Zigzag", 2, (1, 4), 26.0, [(J, -1, 0.0), (J, 0, 8.0), (J, 1, 16.0)]),
    _pattern("Side Switch", 2, (1, 4), 30.0, [(J, -1, 0.0), (J, 1, 10.0), (J, -1, 20.0)]),
    _pattern("Open Middle", 3, (2, 5), 20.0, [(A, -1, 0.0), (A, 1, 0.0)]),
    _pattern("Hurdle Then Block", 4, (3, 6), 24.0, [(J, 0, 0.0), (J, 1, 8.0), (A, 0, 16.0)]),
    _pattern("Pylon Slalom", 5, (3, 7), 32.0,
             [(Y, -1, 0.0), (Y, 1, 8.0), (Y, -1, 16.0), (Y, 1, 24.0)]),
    _pattern("Mixed Row", 5, (4, 7), 16.0, [(A, -1, 0.0), (J, 0, 0.0), (Y, 1, 0.0)]),
    _pattern("Palisade Approach", 6, (4, 8), 20.0, [(J, 0, 0.0), (P, 0, 15.0)]),
    _pattern("Rapid Hurdles", 7, (6, 9), 30.0,
             [(J, -1, 0.0), (J, 0, 5.0), (J, 1, 10.0), (J, -1, 15.0), (J, 0, 20.0), (J, 1, 25.0)]),
    _pattern("Gated Row", 7, (6, 9), 22.0, [(A, -1, 0.0), (J, 0, 0.0), (A, 1, 0.0), (Y, 0, 13.0)]),
    _pattern("Narrow Window", 8, (7, 9), 22.0,
             [(Y, -1, 0.0), (Y, 1, 0.0), (J, 0, 6.0), (Y, -1, 12.0), (Y, 1, 12.0)]),
    _pattern("Broad Jump Run", 8, (6, 9), 24.0, [(B, 0, 0.0), (J, -1, 7.0), (B, 1, 14.0)]),
    _pattern("Gauntlet", 9, (7, 9), 36.0,
             [(A, -1, 0.0), (A, 1, 0.0), (J, 0, 6.0),
              (P, -1, 20.0), (A, 0, 20.0), (A, 1, 20.0)]),
    _pattern("Palisade Gauntlet", 10, (8, 9), 30.0,
             [(Y, -1, 0.0), (Y, 1, 0.0), (J, 0, 6.0), (P, 0, 17.0)]),
)
