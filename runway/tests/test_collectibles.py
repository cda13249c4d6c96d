# runway/tests/test_collectibles.py
from __future__ import annotations

import pytest

from runway.game.collectibles import CollectiblePlanner, lethal_cell
from runway.game.config import ARC_HALF_SPAN, LANES, STANDARD_COLLECTIBLE_POINTS
from runway.game.level_config import default_level_table
from runway.game.models import ObstaclePlacement, ObstacleType, z_bucket
from runway.game.runway import RunwayGenerator

J, A, P, Y = ObstacleType.JUMP, ObstacleType.AVOID, ObstacleType.PALISADE, ObstacleType.PYLON


@pytest.mark.parametrize("level", range(1, 10))
def test_no_collectible_in_lethal_cell(level):
    cfg = default_level_table()[level]
    for seed in (1, 2, 3):
        gen = RunwayGenerator(cfg, seed=seed)
        obstacles, coins = gen.generate(1500.0)
        assert coins
        for c in coins:
            for o in obstacles:
                if o.lane == c.lane and o.type.lethal:
                    assert z_bucket(o.z) != z_bucket(c.z)
                    assert abs(o.z - c.z) >= cfg.min_collectible_obstacle_distance


def test_every_lane_blocked_skips_position(make_config):
    cfg = make_config(min_collectible_spacing=5.0, max_collectible_spacing=5.0,
                      collectible_above_obstacle_chance=0.0)
    wall = [ObstaclePlacement(A, lane, 15.0) for lane in LANES]
    planner = CollectiblePlanner(seed=4)
    coins = planner.plan(cfg, wall, until_z=40.0)
    assert all(c.z != 15.0 for c in coins)
    assert all(not lethal_cell(c.lane, c.z, wall, cfg.min_collectible_obstacle_distance)
               for c in coins)


def test_blocked_lane_resampled(make_config):
    cfg = make_config(collectible_line_bias=1.0, collectible_above_obstacle_chance=0.0)
    block = [ObstaclePlacement(Y, 0, 15.5)]
    planner = CollectiblePlanner(seed=8)
    coins = planner.plan(cfg, block, until_z=18.0)
    assert coins[0].z == 15.0
    assert coins[0].lane in (-1, 1)


def test_point_values(make_config):
    cfg = make_config(mega_collectible_spawn_ratio=0.2, mega_collectible_point_value=75,
                      collectible_above_obstacle_chance=0.0)
    planner = CollectiblePlanner(seed=21)
    coins = planner.plan(cfg, [], until_z=6000.0)
    megas = [c for c in coins if c.is_mega]
    assert all(c.point_value == 75 for c in megas)
    assert all(c.point_value == STANDARD_COLLECTIBLE_POINTS for c in coins if not c.is_mega)
    assert 0.15 < len(megas) / len(coins) < 0.25


def test_no_megas_when_ratio_zero(make_config):
    cfg = make_config(mega_collectible_spawn_ratio=0.0)
    coins = CollectiblePlanner(seed=1).plan(cfg, [], until_z=1000.0)
    assert not any(c.is_mega for c in coins)


def test_line_bias_keeps_coins_in_lane(make_config):
    cfg = make_config(collectible_line_bias=1.0, collectible_above_obstacle_chance=0.0)
    coins = CollectiblePlanner(seed=3).plan(cfg, [], until_z=800.0)
    assert {c.lane for c in coins} == {0}


def test_spacing_within_bounds_or_train(make_config):
    cfg = make_config(min_collectible_spacing=6.0, max_collectible_spacing=9.0,
                      collectible_above_obstacle_chance=0.0)
    coins = CollectiblePlanner(seed=12).plan(cfg, [], until_z=2000.0)
    for a, b in zip(coins, coins[1:]):
        gap = b.z - a.z
        assert gap == pytest.approx(2.5) or 6.0 - 1e-9 <= gap <= 9.0 + 1e-9


def test_arc_over_passable_obstacle(make_config):
    cfg = make_config(collectible_above_obstacle_chance=1.0)
    hurdle = ObstaclePlacement(J, 1, 20.0)
    planner = CollectiblePlanner(seed=2)
    coins = planner.plan(cfg, [hurdle], until_z=60.0)
    arc = [c for c in coins if c.lane == 1 and abs(c.z - 20.0) <= ARC_HALF_SPAN + 1e-9]
    assert len(arc) in (5, 7)
    apex = max(arc, key=lambda c: c.height)
    assert apex.z == pytest.approx(20.0)
    assert apex.height == pytest.approx(2.0)


def test_arc_skips_lethal_cells(make_config):
    cfg = make_config(collectible_above_obstacle_chance=1.0)
    obstacles = [ObstaclePlacement(J, 0, 20.0), ObstaclePlacement(A, 0, 23.0)]
    coins = CollectiblePlanner(seed=2).plan(cfg, obstacles, until_z=60.0)
    for c in coins:
        assert not lethal_cell(c.lane, c.z, obstacles, cfg.min_collectible_obstacle_distance)


def test_plan_stays_behind_cursor(config):
    coins = CollectiblePlanner(seed=5).plan(config, [], until_z=100.0)
    assert coins
    assert all(c.z < 100.0 - config.min_collectible_obstacle_distance for c in coins)


def test_reset_replays_plan(config):
    planner = CollectiblePlanner(seed=9)
    first = planner.plan(config, [], until_z=300.0)
    planner.reset()
    assert planner.plan(config, [], until_z=300.0) == first
