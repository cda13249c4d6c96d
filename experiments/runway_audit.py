# /experiments/runway_audit.py
"""
Audit generated runways against the fairness rules, per level and seed.

Usage (from repo root):
  python -m experiments.runway_audit
  python -m experiments.runway_audit --levels 7,8,9 --seeds 1,2,3 --length 5000
"""

from __future__ import annotations
import argparse
import csv
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np

from runway.game.collectibles import lethal_cell
from runway.game.config import BASE_SPEED, RECOVERY_ZONE_LENGTH, SPRINT_MULTIPLIER
from runway.game.diagnostics import DiagnosticEvent, Diagnostics, EventRecorder
from runway.game.difficulty import reaction_time, resolve_effective_speed
from runway.game.level_config import LevelConfiguration, default_level_table
from runway.game.models import CollectiblePlacement, ObstaclePlacement, Origin
from runway.game.patterns import default_library, unsolvable_rows
from runway.game.runway import RunwayGenerator
from runway.utils.logger_config import configure_logging


def audit_stream(config: LevelConfiguration,
                 obstacles: Sequence[ObstaclePlacement],
                 collectibles: Sequence[CollectiblePlacement]) -> Dict[str, int]:
    """Count rule violations in one generated stream."""
    by_lane: Dict[int, List[float]] = defaultdict(list)
    for o in obstacles:
        by_lane[o.lane].append(o.z)
    spacing = 0
    for zs in by_lane.values():
        gaps = np.diff(np.sort(np.asarray(zs, dtype=float)))
        spacing += int(np.sum(gaps < config.min_obstacle_spacing - 1e-9))

    recovery = 0
    for p in obstacles:
        if p.type.triggers_minigame:
            recovery += sum(1 for o in obstacles if p.z < o.z <= p.z + RECOVERY_ZONE_LENGTH)

    coins_in_lethal = sum(
        1 for c in collectibles
        if lethal_cell(c.lane, c.z, obstacles, 0.0)
    )
    rows = len(unsolvable_rows((o.type, o.lane, o.z) for o in obstacles))
    top_speed = resolve_effective_speed(config, BASE_SPEED, SPRINT_MULTIPLIER)
    return {
        "spacing": spacing,
        "recovery": recovery,
        "lethal_cell": coins_in_lethal,
        "unsolvable_rows": rows,
        "speed_cap": int(top_speed > config.max_effective_speed),
    }


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--levels", type=str, default="", help="Comma-separated levels (default: all)")
    ap.add_argument("--seeds", type=str, default="", help="Comma-separated seeds (default 1..10)")
    ap.add_argument("--length", type=float, default=3000.0, help="Runway length per stream")
    ap.add_argument("--out-dir", type=str, default="experiments/runs")
    ap.add_argument("--log-level", type=str, default="WARNING")
    args = ap.parse_args()

    configure_logging(args.log_level)
    table = default_level_table()
    levels = [int(s) for s in args.levels.split(",") if s.strip()] or sorted(table)
    seeds = [int(s) for s in args.seeds.split(",") if s.strip()] or list(range(1, 11))

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / "runway_audit.csv"
    header = ["level", "seed", "reaction_time", "obstacles", "pattern_share", "collectibles",
              "mega_share", "fallbacks", "substituted",
              "v_spacing", "v_recovery", "v_lethal_cell", "v_unsolvable_rows", "v_speed_cap"]

    total_violations = 0
    with csv_path.open("w", newline="") as f:
        w = csv.writer(f)
        w.writerow(header)
        for level in levels:
            config = table[level]
            shares = []
            for seed in seeds:
                diagnostics = Diagnostics()
                recorder = EventRecorder(diagnostics)
                gen = RunwayGenerator(config, library=default_library(), seed=seed,
                                      diagnostics=diagnostics)
                obstacles, collectibles = gen.generate(args.length)
                v = audit_stream(config, obstacles, collectibles)
                total_violations += sum(v.values())

                n_pattern = sum(1 for o in obstacles if o.origin is Origin.PATTERN)
                share = n_pattern / max(1, len(obstacles))
                shares.append(share)
                mega = sum(1 for c in collectibles if c.is_mega) / max(1, len(collectibles))
                w.writerow([
                    level, seed, f"{reaction_time(config):.3f}", len(obstacles), f"{share:.3f}",
                    len(collectibles), f"{mega:.3f}",
                    recorder.count(DiagnosticEvent.FALLBACK_TO_RANDOM),
                    recorder.count(DiagnosticEvent.ROW_SUBSTITUTED),
                    v["spacing"], v["recovery"], v["lethal_cell"], v["unsolvable_rows"],
                    v["speed_cap"],
                ])
            print(f"[level {level}] pattern share {np.mean(shares):.3f} ± {np.std(shares):.3f} "
                  f"over {len(seeds)} seeds")

    print(f"Wrote {csv_path}")
    if total_violations:
        print(f"✗ {total_violations} rule violations found")
    else:
        print("✓ No rule violations")


if __name__ == "__main__":
    main()
