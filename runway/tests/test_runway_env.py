# runway/tests/test_runway_env.py
"""
Quick tests for RunwayEnv (Gymnasium environment).

Usage (from repo root):
  pytest runway/tests/test_runway_env.py
  python -m runway.tests.test_runway_env --level 9 --steps 600
  python -m runway.tests.test_runway_env --no-api-check --no-determinism
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Tuple

import numpy as np
from gymnasium.utils.env_checker import check_env

from runway.env.observations import build_observation, lethal_lanes_near
from runway.env.runway_env import LEFT, NOOP, RIGHT, RunwayEnv
from runway.game.models import ObstaclePlacement, ObstacleType


def test_api_check(level: int = 1, frame_skip: int = 4) -> None:
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = RunwayEnv(level=level, frame_skip=frame_skip)
    try:
        check_env(env, skip_render_check=True)
    finally:
        env.close()
    print("✓ API check ok")


def test_smoke(steps: int = 300, seed: int = 123, level: int = 5, frame_skip: int = 4) -> None:
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = RunwayEnv(level=level, frame_skip=frame_skip)
    env.action_space.seed(seed)
    try:
        obs, info = env.reset(seed=seed)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["seed"] == seed

        for t in range(steps):
            a = env.action_space.sample()
            obs, r, term, trunc, info = env.step(a)
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            assert info["lane"] in (-1, 0, 1)
            if term:
                assert r == -1.0 and info["death_cause"] in ("Avoid", "Pylon")
                break
            assert r == 1.0
            if trunc:
                break
    finally:
        env.close()
    print("✓ Smoke test ok")


def test_determinism(steps: int = 300, seed: int = 123, level: int = 3, frame_skip: int = 4) -> None:
    """Same seed + same action sequence => identical obs/reward/terminal flags."""
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = RunwayEnv(level=level, frame_skip=frame_skip)
        traj: List[Tuple[np.ndarray, float, bool, bool]] = []
        try:
            obs, _ = env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 4)) for _ in range(steps)]

    t1 = rollout(seed, action_seq)
    t2 = rollout(seed, action_seq)

    assert len(t1) == len(t2), "Determinism: trajectory length mismatch"
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        if not np.allclose(o1, o2):
            raise AssertionError(f"Determinism: obs mismatch at step {i}")
        if not (r1 == r2 and te1 == te2 and tr1 == tr2):
            raise AssertionError(f"Determinism: transition mismatch at step {i}")

    print("✓ Determinism ok")


def test_truncates_at_time_limit() -> None:
    env = RunwayEnv(level=1, frame_skip=4, time_limit_seconds=1.0)
    env.reset(seed=7)
    trunc = term = False
    steps = 0
    while not (trunc or term):
        _, _, term, trunc, _ = env.step(NOOP)
        steps += 1
    assert term or steps == env.time_limit_decisions == 15


def test_lane_changes_clamp() -> None:
    env = RunwayEnv(level=1, time_limit_seconds=10.0)
    env.reset(seed=1)
    env.step(LEFT)
    env.step(LEFT)
    assert env.lane == -1
    for _ in range(3):
        env.step(RIGHT)
    assert env.lane == 1


def test_observation_flags_lethal_lanes() -> None:
    obstacles = [
        ObstaclePlacement(ObstacleType.AVOID, -1, 16.0),
        ObstaclePlacement(ObstacleType.JUMP, 0, 16.0),
        ObstaclePlacement(ObstacleType.PYLON, 1, 34.0),
    ]
    assert lethal_lanes_near(obstacles, 14.0) == (1, 0, 0)
    obs = build_observation(0, 10.0, 20.0, False, 10.0, obstacles)
    assert obs.shape == (12,) and obs.dtype == np.float32
    assert obs[0] == 0.5 and obs[1] == 0.5 and obs[2] == 0.0
    assert list(obs[3:6]) == [1.0, 0.0, 0.0]     # probe at z=16
    assert list(obs[9:12]) == [0.0, 0.0, 1.0]    # probe at z=34


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=123, help="Episode seed for tests")
    ap.add_argument("--level", type=int, default=1, help="Level number")
    ap.add_argument("--steps", type=int, default=300, help="Max decision steps per test")
    ap.add_argument("--frame-skip", type=int, default=4, help="Sim frames per decision step")
    ap.add_argument("--no-api-check", action="store_true", help="Skip Gym API compliance check")
    ap.add_argument("--no-smoke", action="store_true", help="Skip smoke test")
    ap.add_argument("--no-determinism", action="store_true", help="Skip determinism test")
    args = ap.parse_args()

    try:
        if not args.no_api_check:
            test_api_check(level=args.level, frame_skip=args.frame_skip)
        if not args.no_smoke:
            test_smoke(steps=args.steps, seed=args.seed, level=args.level, frame_skip=args.frame_skip)
        if not args.no_determinism:
            test_determinism(steps=args.steps, seed=args.seed, level=args.level,
                             frame_skip=args.frame_skip)
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        print("🎉 All selected tests passed")


if __name__ == "__main__":
    main()
