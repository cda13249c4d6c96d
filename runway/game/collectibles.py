# runway/game/collectibles.py
"""
Collectible planner. Reads the obstacle stream, never writes to it.

Coins follow a "line" lane with some bias, sometimes run as trains, and
sometimes arc over a passable obstacle. A coin is never placed in the same
lane and cell as a lethal obstacle.
"""
from __future__ import annotations
import logging
import random
from typing import List, Optional, Sequence, Set, Tuple

from runway.game.config import (
    ARC_COIN_COUNTS, ARC_HALF_SPAN, ARC_LOOKAHEAD, ARC_PEAK_HEIGHTS, COLLECTIBLE_HEIGHT,
    COLLECTIBLE_START_Z, LANES, NEAR_OBSTACLE_DISTANCE, STANDARD_COLLECTIBLE_POINTS,
    TRAIN_MAX_COINS, TRAIN_MIN_COINS, TRAIN_SPACING, TRAIN_START_CHANCE, Z_BUCKET_SIZE,
)
from runway.game.level_config import LevelConfiguration
from runway.game.models import CollectiblePlacement, ObstaclePlacement, z_bucket

logger = logging.getLogger(__name__)


def lethal_cell(lane: int, z: float, obstacles: Sequence[ObstaclePlacement],
                min_distance: float) -> bool:
    """True if a lethal obstacle shares the lane and the z-cell (or is closer than min_distance)."""
    bucket = z_bucket(z)
    for o in obstacles:
        if o.lane != lane or not o.type.lethal:
            continue
        if z_bucket(o.z) == bucket or abs(o.z - z) < min_distance:
            return True
    return False


class CollectiblePlanner:
    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.next_z = COLLECTIBLE_START_Z
        self.line_lane = 0
        self.train_left = 0
        self._considered: Set[Tuple[int, float]] = set()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.seed = seed
        if self.seed is not None:
            self.rng.seed(self.seed)
        self.next_z = COLLECTIBLE_START_Z
        self.line_lane = 0
        self.train_left = 0
        self._considered.clear()

    def plan(self, config: LevelConfiguration, obstacles: Sequence[ObstaclePlacement],
             until_z: float) -> List[CollectiblePlacement]:
        """
        Place collectibles up to until_z (normally the scheduler cursor).
        Positions stay far enough behind until_z that obstacles emitted later
        cannot land in their cell.
        """
        horizon = until_z - max(config.min_collectible_obstacle_distance, Z_BUCKET_SIZE)
        out: List[CollectiblePlacement] = []
        while self.next_z < horizon:
            out.extend(self._plan_position(config, obstacles, horizon))
        return out

    # -------------------- Position --------------------

    def _plan_position(self, config: LevelConfiguration,
                       obstacles: Sequence[ObstaclePlacement],
                       horizon: float) -> List[CollectiblePlacement]:
        z = self.next_z

        target = self._arc_target(z, obstacles, horizon)
        if target is not None:
            self._considered.add((target.lane, target.z))
            if self.rng.random() < config.collectible_above_obstacle_chance:
                coins = self._arc(config, target, obstacles)
                self.train_left = 0
                self.line_lane = target.lane
                self.next_z = max(z, target.z + ARC_HALF_SPAN) + self._spacing(config)
                return coins

        if self.train_left > 0 and self._lethal_ahead(
                obstacles, self.line_lane, z, TRAIN_SPACING * self.train_left):
            self.train_left = 0

        if self.train_left > 0:
            lane = self.line_lane
        else:
            lane = self._biased_lane(config)
            if self.rng.random() < TRAIN_START_CHANCE:
                self.train_left = self.rng.randint(TRAIN_MIN_COINS, TRAIN_MAX_COINS)

        lane = self._resolve_lane(lane, z, obstacles, config)
        if lane is None:
            # every lane is lethal here
            self.train_left = 0
            self.next_z = z + self._spacing(config)
            return []

        is_mega, points = self._value(config)
        coin = CollectiblePlacement(lane=lane, z=z, is_mega=is_mega, point_value=points)
        self.line_lane = lane
        if self.train_left > 0:
            self.train_left -= 1
        self.next_z = z + (TRAIN_SPACING if self.train_left > 0 else self._spacing(config))
        return [coin]

    # -------------------- Helpers --------------------

    def _spacing(self, config: LevelConfiguration) -> float:
        return self.rng.uniform(config.min_collectible_spacing, config.max_collectible_spacing)

    def _value(self, config: LevelConfiguration) -> Tuple[bool, int]:
        if self.rng.random() < config.mega_collectible_spawn_ratio:
            return True, config.mega_collectible_point_value
        return False, STANDARD_COLLECTIBLE_POINTS

    def _biased_lane(self, config: LevelConfiguration) -> int:
        if self.rng.random() < config.collectible_line_bias:
            return self.line_lane
        return self.rng.choice([lane for lane in LANES if lane != self.line_lane])

    def _resolve_lane(self, lane: int, z: float, obstacles: Sequence[ObstaclePlacement],
                      config: LevelConfiguration) -> Optional[int]:
        dist = config.min_collectible_obstacle_distance
        if not lethal_cell(lane, z, obstacles, dist):
            return lane
        others = [other for other in LANES if other != lane]
        self.rng.shuffle(others)
        for other in others:
            if not lethal_cell(other, z, obstacles, dist):
                return other
        return None

    def _lethal_ahead(self, obstacles: Sequence[ObstaclePlacement], lane: int,
                      z: float, reach: float) -> bool:
        return any(o.lane == lane and o.type.lethal and z <= o.z <= z + reach
                   for o in obstacles)

    def _arc_target(self, z: float, obstacles: Sequence[ObstaclePlacement],
                    horizon: float) -> Optional[ObstaclePlacement]:
        """Nearest passable obstacle around z that has not been considered for an arc yet."""
        best = None
        for o in obstacles:
            if not o.type.passable or (o.lane, o.z) in self._considered:
                continue
            if not z + ARC_HALF_SPAN - NEAR_OBSTACLE_DISTANCE <= o.z <= z + ARC_LOOKAHEAD:
                continue
            if o.z + ARC_HALF_SPAN >= horizon:
                continue
            if best is None or abs(o.z - z) < abs(best.z - z):
                best = o
        return best

    def _arc(self, config: LevelConfiguration, target: ObstaclePlacement,
             obstacles: Sequence[ObstaclePlacement]) -> List[CollectiblePlacement]:
        count = self.rng.choice(ARC_COIN_COUNTS)
        peak = ARC_PEAK_HEIGHTS.get(target.type.value, COLLECTIBLE_HEIGHT)
        coins: List[CollectiblePlacement] = []
        for i in range(count):
            t = i / (count - 1)
            cz = target.z - ARC_HALF_SPAN + 2.0 * ARC_HALF_SPAN * t
            if lethal_cell(target.lane, cz, obstacles, config.min_collectible_obstacle_distance):
                continue
            height = COLLECTIBLE_HEIGHT + 4.0 * (peak - COLLECTIBLE_HEIGHT) * t * (1.0 - t)
            is_mega, points = self._value(config)
            coins.append(CollectiblePlacement(lane=target.lane, z=cz, is_mega=is_mega,
                                              point_value=points, height=height))
        logger.debug(f"Arc of {len(coins)} over {target.type.value} at z={target.z:.2f}")
        return coins
