# runway/env/runway_env.py
from __future__ import annotations
from typing import Any, Dict, Optional
import numpy as np
import gymnasium as gym

from runway.game.config import LANES, SIM_FPS, SPAWN_DISTANCE
from runway.game.level_config import LevelConfiguration, level_config
from runway.game.patterns import PatternLibrary, default_library
from runway.game.runway import RunwayGenerator
from runway.env.observations import OBS_SIZE, build_observation

NOOP, LEFT, RIGHT, SPRINT = 0, 1, 2, 3


class RunwayEnv(gym.Env):
    """
    Lane runner Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Passable obstacles are cleared automatically; a lethal one in the
      player's lane ends the episode.
    - Observation: shape (12,), float32.
    """
    metadata = {"render_modes": []}

    def __init__(self,
                 level: int = 1,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = None,
                 config: Optional[LevelConfiguration] = None,
                 library: Optional[PatternLibrary] = None):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        self.config = config if config is not None else level_config(level)
        self.library = library if library is not None else default_library()
        self.frame_skip = int(frame_skip)

        self.sim_fps = SIM_FPS
        self.dt = 1.0 / self.sim_fps

        # Truncate at the level's end unless told otherwise
        limit_s = time_limit_seconds if time_limit_seconds is not None else self.config.level_duration
        self.time_limit_decisions = int(self.sim_fps * limit_s / self.frame_skip)

        # Actions: 0 = NOOP, 1 = LEFT, 2 = RIGHT, 3 = SPRINT (this decision only)
        self.action_space = gym.spaces.Discrete(4)
        self.observation_space = gym.spaces.Box(low=0.0, high=1.0, shape=(OBS_SIZE,),
                                                dtype=np.float32)

        # --- Runtime state ---
        self.runway: Optional[RunwayGenerator] = None
        self.lane: int = 0
        self.alive: bool = True
        self.sprinting: bool = False
        self.speed: float = 0.0
        self.score: int = 0
        self.cleared: int = 0
        self.timestep: int = 0
        self.current_seed: Optional[int] = None
        self.death_cause: Optional[str] = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # Seeding policy:
        # - A given seed goes straight to the generator for strict reproducibility.
        # - Otherwise the generator draws its own seed (kept in info["seed"]).
        level_seed = int(seed) if seed is not None else None

        self.runway = RunwayGenerator(self.config, library=self.library, seed=level_seed)
        self.runway.fill(self.runway.distance + SPAWN_DISTANCE)
        self.lane = 0
        self.alive = True
        self.sprinting = False
        self.speed = 0.0
        self.score = 0
        self.cleared = 0
        self.timestep = 0
        self.death_cause = None
        self.current_seed = self.runway.seed

        obs = self._get_obs()
        info = {"seed": self.current_seed, "distance": self.runway.distance}
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.runway is not None

        action = int(action)
        if action == LEFT:
            self.lane = max(LANES[0], self.lane - 1)
        elif action == RIGHT:
            self.lane = min(LANES[-1], self.lane + 1)
        self.sprinting = action == SPRINT

        for _ in range(self.frame_skip):
            prev = self.runway.distance
            self.speed = self.runway.update(self.dt, sprinting=self.sprinting)
            if self._resolve_contacts(prev, self.runway.distance):
                break

        reward = 1.0 if self.alive else -1.0

        self.timestep += 1
        terminated = not self.alive
        truncated = self.alive and self.timestep >= self.time_limit_decisions

        obs = self._get_obs()
        info = {
            "distance": self.runway.distance,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "score": self.score,
            "cleared": self.cleared,
            "lane": self.lane,
            "death_cause": self.death_cause,
        }
        return obs, reward, terminated, truncated, info

    # -------------------- Helpers --------------------

    def _resolve_contacts(self, z0: float, z1: float) -> bool:
        """Handle everything passed in (z0, z1]; True on death."""
        for o in self.runway.obstacles:
            if o.lane != self.lane or not (z0 < o.z <= z1):
                continue
            if o.type.lethal:
                self.alive = False
                self.death_cause = o.type.value
                return True
            self.cleared += 1
        for c in self.runway.collectibles:
            if c.lane == self.lane and z0 < c.z <= z1:
                self.score += c.point_value
        return False

    def _get_obs(self) -> np.ndarray:
        assert self.runway is not None
        return build_observation(self.lane, self.speed, self.config.max_effective_speed,
                                 self.sprinting, self.runway.distance, self.runway.obstacles)

    def close(self):
        self.runway = None
