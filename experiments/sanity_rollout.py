# /experiments/sanity_rollout.py
"""
Sanity rollouts for RunwayEnv:
- Runs RANDOM and/or TINY-HEURISTIC policies over fixed seeds
- Writes an episodes CSV for notebook analysis
- Optionally saves per-episode action sequences for exact replay

Usage examples (from repo root):
  # Both policies over 20 default seeds on level 1:
  python -m experiments.sanity_rollout --policies both

  # Only heuristic on the last level, custom seeds, save actions:
  python -m experiments.sanity_rollout --policies heuristic --level 9 --seeds 111,222,333 --save-traces
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from runway.env.runway_env import LEFT, NOOP, RIGHT, RunwayEnv
from runway.utils.logger_config import configure_logging


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.randint(0, 4))
    return act

def tiny_heuristic_policy_init():
    """
    Very small rule: if the nearest probe shows a lethal obstacle in the
    current lane, step towards an adjacent lane that is clear at that probe.
    """
    def act(obs: np.ndarray) -> int:
        lane = int(round(obs[0] * 2)) - 1          # back to -1/0/1
        near = obs[3:6]                            # lethal flags L, C, R at the nearest probe
        if near[lane + 1] < 0.5:
            return NOOP
        if lane > -1 and near[lane] < 0.5:
            return LEFT
        if lane < 1 and near[lane + 2] < 0.5:
            return RIGHT
        return NOOP
    return act


# ------------------------ Rollout core ------------------------

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str,
                    seed: int,
                    level: int,
                    frame_skip: int,
                    steps_limit: int,
                    save_traces: bool,
                    out_dir: Path) -> Tuple[int, float, float, int, bool, bool, Optional[str]]:
    """
    Returns: (ep_len, ret_sum, distance, score, terminated, truncated, death_cause)
    """
    env = RunwayEnv(level=level, frame_skip=frame_skip)

    if policy_name == "random":
        action_seed = 10_000 + seed
        policy = random_policy_init(action_seed)
    elif policy_name == "heuristic":
        action_seed = -1
        policy = tiny_heuristic_policy_init()
    else:
        raise ValueError("Unknown policy")

    actions: List[int] = []
    ret_sum = 0.0
    ep_len = 0
    term = trunc = False
    info = {}

    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps_limit):
            a = policy(obs)
            actions.append(int(a))
            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            ep_len += 1
            if term or trunc:
                break
    finally:
        env.close()

    if save_traces:
        trace_dir = out_dir / "traces" / policy_name
        ensure_dir(trace_dir)
        np.save(trace_dir / f"L{level}_{seed}_actions.npy", np.asarray(actions, dtype=np.int8))
        meta_lines = [
            f"seed={seed}",
            f"level={level}",
            f"frame_skip={frame_skip}",
            f"policy={policy_name}",
            f"action_rng_seed={action_seed}",
        ]
        (trace_dir / f"L{level}_{seed}_meta.txt").write_text("\n".join(meta_lines), encoding="utf-8")

    return (ep_len, ret_sum, float(info.get("distance", 0.0)), int(info.get("score", 0)),
            bool(term), bool(trunc), info.get("death_cause"))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["random", "heuristic", "both"])
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--level", type=int, default=1)
    ap.add_argument("--frame-skip", type=int, default=4)
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env truncates at the level end)")
    ap.add_argument("--out-dir", type=str, default="experiments/runs")
    ap.add_argument("--save-traces", action="store_true")
    args = ap.parse_args()

    configure_logging("WARNING")
    out_dir = Path(args.out_dir)
    ensure_dir(out_dir)

    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))

    episodes_csv = out_dir / "episodes.csv"
    header = [
        "policy_name", "seed", "level", "frame_skip",
        "episode_len_decisions", "return_sum", "distance", "score",
        "terminated", "truncated", "death_cause",
    ]
    to_run = ["random", "heuristic"] if args.policies == "both" else [args.policies]

    print(f"Running policies={to_run} on {len(seeds)} seeds (level={args.level}, "
          f"frame_skip={args.frame_skip})")

    for policy_name in to_run:
        returns = []
        for seed in seeds:
            ep_len, ret_sum, dist, score, terminated, truncated, death_cause = run_one_episode(
                policy_name=policy_name,
                seed=seed,
                level=args.level,
                frame_skip=args.frame_skip,
                steps_limit=args.steps,
                save_traces=args.save_traces,
                out_dir=out_dir,
            )
            returns.append(ret_sum)
            write_episode_row(episodes_csv, header, [
                policy_name, seed, args.level, args.frame_skip,
                ep_len, f"{ret_sum:.1f}", f"{dist:.1f}", score,
                int(terminated), int(truncated), (death_cause or ""),
            ])
            print(f"[{policy_name}] seed={seed}  len={ep_len}  dist={dist:.1f}  score={score}  "
                  f"ret={ret_sum:.1f}  term={terminated} trunc={truncated}  cause={death_cause}")
        print(f"[{policy_name}] mean return {np.mean(returns):.1f} ± {np.std(returns):.1f}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
