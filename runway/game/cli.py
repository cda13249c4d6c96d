# runway/game/cli.py
"""
Dump a generated runway as JSON lines.

Usage (from repo root):
  python -m runway.game.cli --level 3 --length 500
  python -m runway.game.cli --level 9 --seed -1 --no-collectibles
  runway-generate --levels-file levels.json --patterns-file patterns.json
"""
from __future__ import annotations
import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from runway.game.config import SEED_DEFAULT
from runway.game.diagnostics import Diagnostics
from runway.game.errors import ConfigurationError
from runway.game.level_config import default_level_table, level_config, load_level_table
from runway.game.patterns import default_library, load_patterns, patterns_from_json
from runway.game.runway import RunwayGenerator
from runway.utils.logger_config import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate a lane runway and print it as JSON lines")
    ap.add_argument("--level", type=int, default=1, help="Level number (1..9 on the default ladder)")
    ap.add_argument("--seed", type=int, default=None,
                    help=f"Level seed (default {SEED_DEFAULT}; -1 for a random seed)")
    ap.add_argument("--length", type=float, default=300.0, help="Generate up to this z")
    ap.add_argument("--levels-file", type=str, default="", help="JSON level ladder")
    ap.add_argument("--patterns-file", type=str, default="", help="JSON pattern records")
    ap.add_argument("--no-collectibles", action="store_true", help="Only print obstacles")
    ap.add_argument("--log-level", type=str, default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.seed is None:
        seed = SEED_DEFAULT
    elif args.seed == -1:
        seed = random.randrange(0, 2**32 - 1)
    else:
        seed = args.seed

    diagnostics = Diagnostics()
    try:
        table = load_level_table(Path(args.levels_file)) if args.levels_file else default_level_table()
        config = level_config(args.level, table)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.patterns_file:
        try:
            library = load_patterns(patterns_from_json(Path(args.patterns_file)), diagnostics)
        except (ConfigurationError, FileNotFoundError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
    else:
        library = default_library(diagnostics)

    gen = RunwayGenerator(config, library=library, seed=seed, diagnostics=diagnostics)
    obstacles, collectibles = gen.generate(args.length)

    rows = [o.to_dict() for o in obstacles]
    if not args.no_collectibles:
        rows += [c.to_dict() for c in collectibles]
    rows.sort(key=lambda r: r["z"])

    logger.info(f"level={config.level_number} seed={seed} rows={len(rows)}")
    for row in rows:
        print(json.dumps(row))
    return 0


if __name__ == "__main__":
    sys.exit(main())
