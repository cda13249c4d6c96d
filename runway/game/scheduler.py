# runway/game/scheduler.py
"""
Obstacle scheduler: one call to advance() is one generation tick.

Each tick either emits nothing (recovery zone), a whole pattern, or a single
random obstacle. Every random draw comes from the scheduler's own rng, so a
seed fully determines the obstacle stream.
"""
from __future__ import annotations
import logging
import random
from collections import Counter
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from runway.game.config import (
    LANES, LANE_CONFLICT_FACTOR, LANE_RESAMPLE_LIMIT, TRACKING_HORIZON,
)
from runway.game.diagnostics import DiagnosticEvent, Diagnostics
from runway.game.errors import GenerationFallback
from runway.game.level_config import LevelConfiguration
from runway.game.models import (
    LETHAL_TYPES, PASSABLE_TYPES, Emission, ObstaclePattern, ObstaclePlacement,
    ObstacleType, Origin, z_bucket,
)
from runway.game.patterns import PatternLibrary
from runway.game.recovery import RecoveryZoneEnforcer
from runway.game.tracker import ObstacleTracker, RunwayCursor

logger = logging.getLogger(__name__)


def enforce_passable_rows(placements: Sequence[ObstaclePlacement],
                          tracked: Iterable[ObstaclePlacement] = ()
                          ) -> Tuple[Tuple[ObstaclePlacement, ...], List[ObstaclePlacement]]:
    """
    Last line of defense against an all-lethal row: for every z-bucket touched
    by the new placements, if new and tracked obstacles together cover all
    lanes with nothing passable, the last new lethal member becomes a Jump.
    Returns (placements, substituted).
    """
    out = list(placements)
    tracked = list(tracked)
    substituted: List[ObstaclePlacement] = []
    for bucket in sorted({z_bucket(p.z) for p in out}):
        new_idx = [i for i, p in enumerate(out) if z_bucket(p.z) == bucket]
        row = [out[i] for i in new_idx] + [r for r in tracked if z_bucket(r.z) == bucket]
        if not {p.lane for p in row}.issuperset(LANES):
            continue
        if any(p.type.passable for p in row):
            continue
        i = new_idx[-1]
        out[i] = replace(out[i], type=ObstacleType.JUMP)
        substituted.append(out[i])
    return tuple(out), substituted


class ObstacleScheduler:
    def __init__(self, library: PatternLibrary,
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.library = library
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.cursor = RunwayCursor()
        self.tracker = ObstacleTracker()
        self.recovery = RecoveryZoneEnforcer(self.diagnostics)
        self.stats: Counter = Counter()

    @property
    def cursor_z(self) -> float:
        return self.cursor.z

    def reset(self, seed: Optional[int] = None) -> None:
        """Level restart: drop all runway state and rewind the rng to the seed."""
        if seed is not None:
            self.seed = seed
        if self.seed is not None:
            self.rng.seed(self.seed)
        self.cursor.reset()
        self.tracker.reset()
        self.recovery.reset()
        self.stats.clear()

    # -------------------- Tick --------------------

    def advance(self, config: LevelConfiguration,
                cursor_z: Optional[float] = None) -> Optional[Emission]:
        if cursor_z is not None:
            self.cursor.move_to(cursor_z)

        if self.recovery.is_blocking(self.cursor.z):
            self.stats["blocked"] += 1
            return None

        emission: Optional[Emission] = None
        if self.rng.random() < config.pattern_usage_ratio:
            candidates = self._candidates(config)
            if candidates:
                pattern = self._pick_pattern(candidates, config)
                try:
                    emission = self._place_pattern(pattern, config)
                except GenerationFallback as fb:
                    logger.debug(f"Pattern {fb.pattern_name!r} skipped: {fb.reason}")
                    self.diagnostics.emit(DiagnosticEvent.PATTERN_CLEARANCE_FAILED,
                                          pattern=fb.pattern_name, cursor_z=self.cursor.z)
                    self.diagnostics.emit(DiagnosticEvent.FALLBACK_TO_RANDOM,
                                          reason="clearance", pattern=fb.pattern_name)
                    self.stats["fallback"] += 1
            else:
                self.diagnostics.emit(DiagnosticEvent.FALLBACK_TO_RANDOM,
                                      reason="no-candidates", level=config.level_number)
                self.stats["fallback"] += 1

        if emission is None:
            emission = self._place_random(config)

        self.recovery.register(emission.placements)
        # only after every clearance check of this tick
        self.tracker.prune(self.cursor.z - max(TRACKING_HORIZON, config.max_obstacle_spacing))
        self.stats[emission.origin.value] += 1
        return emission

    # -------------------- Pattern --------------------

    def _candidates(self, config: LevelConfiguration) -> Tuple[ObstaclePattern, ...]:
        """Level and difficulty fit, minus patterns packing one lane tighter than the level allows."""
        candidates = self.library.select_candidates(
            config.level_number, config.min_pattern_difficulty, config.max_pattern_difficulty)
        return tuple(p for p in candidates if p.min_lane_gap >= config.min_obstacle_spacing)

    def _pick_pattern(self, candidates: Sequence[ObstaclePattern],
                      config: LevelConfiguration) -> ObstaclePattern:
        """Weighted towards the middle of the level's difficulty window."""
        mid = config.pattern_difficulty_midpoint
        weights = [1.0 / (1.0 + abs(p.difficulty - mid)) for p in candidates]
        x = self.rng.random() * sum(weights)
        acc = 0.0
        for pattern, w in zip(candidates, weights):
            acc += w
            if x < acc:
                return pattern
        return candidates[-1]

    def _place_pattern(self, pattern: ObstaclePattern,
                       config: LevelConfiguration) -> Emission:
        origin_z = self.cursor.z
        # lead-in of one random spacing when the previous obstacle is too close to the cursor
        if self.tracker.nearest_distance(origin_z) < config.min_obstacle_spacing:
            origin_z += self.rng.uniform(config.min_obstacle_spacing, config.max_obstacle_spacing)
        first_z = origin_z + pattern.first_offset
        gap = self.tracker.nearest_distance(first_z)
        if gap < config.min_obstacle_spacing:
            raise GenerationFallback(pattern.name, f"nearest obstacle {gap:.2f} "
                                                   f"< {config.min_obstacle_spacing}")

        placements = [
            ObstaclePlacement(type=o.type, lane=o.lane, z=origin_z + o.z_offset,
                              origin=Origin.PATTERN, pattern_name=pattern.name)
            for o in pattern.obstacles
        ]
        placed = self._commit(placements)
        self.cursor.move_to(origin_z + pattern.length)
        self.diagnostics.emit(DiagnosticEvent.PATTERN_SPAWNED, pattern=pattern.name,
                              z=origin_z, difficulty=pattern.difficulty)
        return Emission(Origin.PATTERN, placed, self.cursor.z, pattern.name)

    # -------------------- Random --------------------

    def _place_random(self, config: LevelConfiguration) -> Emission:
        spacing = self.rng.uniform(config.min_obstacle_spacing, config.max_obstacle_spacing)
        z = self.cursor.z + spacing
        lethal = self.rng.random() < config.avoid_obstacle_probability
        otype = self.rng.choice(LETHAL_TYPES if lethal else PASSABLE_TYPES)
        lane = self.rng.choice(LANES)

        if otype.lethal:
            radius = LANE_CONFLICT_FACTOR * config.min_obstacle_spacing
            attempts = 0
            while self.tracker.lethal_conflict(lane, z, radius) and attempts < LANE_RESAMPLE_LIMIT:
                lane = self.rng.choice(LANES)
                attempts += 1
            if self.tracker.lethal_conflict(lane, z, radius):
                forced = self.rng.choice(PASSABLE_TYPES)
                self.diagnostics.emit(DiagnosticEvent.LANE_RESAMPLE_EXHAUSTED,
                                      z=z, lane=lane, replaced=otype.value, type=forced.value)
                otype = forced

        placed = self._commit([ObstaclePlacement(type=otype, lane=lane, z=z)])
        self.cursor.advance(spacing)
        return Emission(Origin.RANDOM, placed, self.cursor.z)

    def _commit(self, placements: List[ObstaclePlacement]) -> Tuple[ObstaclePlacement, ...]:
        placed, substituted = enforce_passable_rows(placements, self.tracker)
        for p in substituted:
            self.diagnostics.emit(DiagnosticEvent.ROW_SUBSTITUTED, z=p.z, lane=p.lane)
        self.tracker.record(placed)
        return placed
