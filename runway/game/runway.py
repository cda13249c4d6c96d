# runway/game/runway.py
from __future__ import annotations
import logging
import random
from typing import List, Optional, Tuple

from runway.game.collectibles import CollectiblePlanner
from runway.game.config import (
    BASE_SPEED, DESPAWN_DISTANCE, LEVEL_END_QUIET_S, SPAWN_DISTANCE, SPRINT_MULTIPLIER,
)
from runway.game.diagnostics import Diagnostics
from runway.game.difficulty import check_reaction_time, resolve_effective_speed
from runway.game.level_config import LevelConfiguration
from runway.game.models import CollectiblePlacement, Emission, ObstaclePlacement
from runway.game.patterns import PatternLibrary, default_library
from runway.game.scheduler import ObstacleScheduler

logger = logging.getLogger(__name__)

# Planner rng is derived from the level seed so both streams replay together
PLANNER_SEED_SALT = 0x5EED


class RunwayGenerator:
    """
    Drives the scheduler and the collectible planner from the game loop.
    Keeps the placements between the player and the spawn frontier.
    """

    def __init__(self, config: LevelConfiguration,
                 library: Optional[PatternLibrary] = None,
                 seed: Optional[int] = None,
                 diagnostics: Optional[Diagnostics] = None):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.config = config
        self.seed = seed
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.library = library if library is not None else default_library(self.diagnostics)
        self.scheduler = ObstacleScheduler(self.library, seed=seed, diagnostics=self.diagnostics)
        self.planner = CollectiblePlanner(seed=seed ^ PLANNER_SEED_SALT)
        self.reaction_ok = check_reaction_time(config, self.diagnostics)

        self.obstacles: List[ObstaclePlacement] = []
        self.collectibles: List[CollectiblePlacement] = []
        self.distance = 0.0
        self.elapsed = 0.0

    def reset(self, seed: Optional[int] = None) -> None:
        """Restart the level; same stream unless a new seed is given."""
        if seed is not None:
            self.seed = seed
        self.scheduler.reset(self.seed)
        self.planner.reset(self.seed ^ PLANNER_SEED_SALT)
        self.obstacles = []
        self.collectibles = []
        self.distance = 0.0
        self.elapsed = 0.0

    @property
    def spawning(self) -> bool:
        return self.elapsed < self.config.level_duration - LEVEL_END_QUIET_S

    @property
    def level_over(self) -> bool:
        return self.elapsed >= self.config.level_duration

    # -------------------- Game loop --------------------

    def update(self, dt: float, sprinting: bool = False) -> float:
        """Move the player forward by one frame; returns the speed used."""
        speed = resolve_effective_speed(self.config, BASE_SPEED,
                                        SPRINT_MULTIPLIER if sprinting else 1.0)
        self.distance += speed * dt
        self.elapsed += dt

        if self.spawning:
            self.fill(self.distance + SPAWN_DISTANCE)

        behind = self.distance - DESPAWN_DISTANCE
        self.obstacles = [o for o in self.obstacles if o.z >= behind]
        self.collectibles = [c for c in self.collectibles if c.z >= behind]
        return speed

    def fill(self, frontier_z: float) -> int:
        """Generate until the cursor reaches frontier_z or a recovery zone blocks."""
        emitted = 0
        while self.scheduler.cursor_z < frontier_z:
            emission = self.scheduler.advance(self.config, frontier_z)
            if emission is None:
                break
            self._accept(emission)
            emitted += 1
        self._plan_collectibles()
        return emitted

    # -------------------- Offline --------------------

    def generate(self, until_z: float, step: float = 1.0
                 ) -> Tuple[List[ObstaclePlacement], List[CollectiblePlacement]]:
        """
        Generate a runway up to until_z without a player. While a recovery
        zone blocks, the probe walks forward by `step`. Nothing is despawned.
        """
        if step <= 0:
            raise ValueError("step must be > 0")
        n_obs, n_col = len(self.obstacles), len(self.collectibles)
        probe = self.scheduler.cursor_z
        while self.scheduler.cursor_z < until_z:
            emission = self.scheduler.advance(self.config, probe)
            if emission is None:
                probe = max(probe, self.scheduler.cursor_z) + step
                continue
            self._accept(emission)
            probe = self.scheduler.cursor_z
        self._plan_collectibles()
        logger.info(f"Generated level {self.config.level_number} to z={until_z:.1f}: "
                    f"{len(self.obstacles) - n_obs} obstacles, "
                    f"{len(self.collectibles) - n_col} collectibles")
        return self.obstacles[n_obs:], self.collectibles[n_col:]

    # -------------------- Internals --------------------

    def _accept(self, emission: Emission) -> None:
        self.obstacles.extend(emission.placements)

    def _plan_collectibles(self) -> None:
        near = self.planner.next_z - DESPAWN_DISTANCE
        window = [o for o in self.obstacles if o.z >= near]
        self.collectibles.extend(self.planner.plan(self.config, window, self.scheduler.cursor_z))
