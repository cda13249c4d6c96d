# runway/env/observations.py
from __future__ import annotations
from typing import Iterable, Tuple
import numpy as np

from runway.game.config import LANES
from runway.game.models import ObstaclePlacement

# Probe distances ahead of the player (runway units)
PROBE_OFFSETS: Tuple[float, float, float] = (6.0, 14.0, 24.0)
# Half-width of the z window around a probe
PROBE_WINDOW: float = 4.0

OBS_SIZE = 3 + len(PROBE_OFFSETS) * len(LANES)


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def lethal_lanes_near(obstacles: Iterable[ObstaclePlacement], z: float,
                      window: float = PROBE_WINDOW) -> Tuple[int, int, int]:
    """(left, center, right) flags: 1 if a lethal obstacle sits within ±window of z."""
    flags = [0, 0, 0]
    for o in obstacles:
        if o.type.lethal and abs(o.z - z) <= window:
            flags[LANES.index(o.lane)] = 1
    return flags[0], flags[1], flags[2]


def build_observation(lane: int, speed: float, max_speed: float, sprinting: bool,
                      distance: float, obstacles: Iterable[ObstaclePlacement],
                      probe_offsets: Tuple[float, ...] = PROBE_OFFSETS) -> np.ndarray:
    """
    Returns a fixed (12,) float32 vector:
      [ lane_norm, speed_norm, sprint,
        lethalL@p0, lethalC@p0, lethalR@p0,
        lethalL@p1, lethalC@p1, lethalR@p1,
        lethalL@p2, lethalC@p2, lethalR@p2 ]
    All entries are in [0, 1].
    """
    obstacles = [o for o in obstacles if o.z > distance]
    feats = [
        (lane - LANES[0]) / float(LANES[-1] - LANES[0]),
        _clamp01(speed / max(1e-6, max_speed)),
        1.0 if sprinting else 0.0,
    ]
    for off in probe_offsets:
        feats.extend(lethal_lanes_near(obstacles, distance + off))
    return np.asarray(feats, dtype=np.float32)
