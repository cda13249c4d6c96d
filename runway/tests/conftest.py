# runway/tests/conftest.py
from __future__ import annotations
import random
from collections import deque
from typing import Iterable

import pytest

from runway.game.level_config import LevelConfiguration


class ScriptedRandom(random.Random):
    """random() and choice() replay queued values first, then fall back to the seeded stream."""

    def __init__(self, draws: Iterable[float] = (), picks: Iterable = (), seed: int = 0):
        super().__init__(seed)
        self.draws = deque(draws)
        self.picks = deque(picks)

    def random(self):
        if self.draws:
            return self.draws.popleft()
        return super().random()

    # keeps choice/randint/shuffle on getrandbits instead of random()
    def getrandbits(self, k):
        return super().getrandbits(k)

    def choice(self, seq):
        if self.picks:
            value = self.picks.popleft()
            assert value in seq, f"scripted pick {value!r} not in {seq!r}"
            return value
        return super().choice(seq)


BASE_CONFIG = dict(
    level_number=3, level_duration=60.0,
    min_obstacle_spacing=12.0, max_obstacle_spacing=20.0, avoid_obstacle_probability=0.2,
    min_collectible_spacing=4.0, max_collectible_spacing=10.0, collectible_line_bias=0.65,
    collectible_above_obstacle_chance=0.3, mega_collectible_spawn_ratio=0.05,
    mega_collectible_point_value=50, speed_multiplier=1.2, max_effective_speed=20.0,
    min_pattern_difficulty=1, max_pattern_difficulty=5, pattern_usage_ratio=0.5,
)


def build_config(**overrides) -> LevelConfiguration:
    raw = dict(BASE_CONFIG)
    raw.update(overrides)
    return LevelConfiguration(**raw)


@pytest.fixture
def make_config():
    return build_config


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
