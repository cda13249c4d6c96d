# runway/game/tracker.py
from __future__ import annotations
from collections import deque
from typing import Deque, Iterable, Iterator

from runway.game.config import MAX_TRACKED_RECORDS
from runway.game.models import ObstaclePlacement


class RunwayCursor:
    """Forward position of the generation frontier. Never moves backward."""

    def __init__(self, z: float = 0.0):
        self._z = float(z)

    @property
    def z(self) -> float:
        return self._z

    def advance(self, dz: float) -> float:
        if dz < 0:
            raise ValueError(f"cursor cannot move backward (dz={dz})")
        self._z += dz
        return self._z

    def move_to(self, z: float) -> float:
        self._z = max(self._z, float(z))
        return self._z

    def reset(self) -> None:
        self._z = 0.0


class ObstacleTracker:
    """Recently placed obstacles, bounded and ordered by insertion."""

    def __init__(self, max_records: int = MAX_TRACKED_RECORDS):
        self._records: Deque[ObstaclePlacement] = deque(maxlen=max_records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ObstaclePlacement]:
        return iter(self._records)

    def record(self, placements: Iterable[ObstaclePlacement]) -> None:
        self._records.extend(placements)

    def nearest_distance(self, z: float) -> float:
        """Distance from z to the closest tracked record (inf if empty)."""
        return min((abs(r.z - z) for r in self._records), default=float("inf"))

    def lethal_conflict(self, lane: int, z: float, radius: float) -> bool:
        return any(r.lane == lane and r.type.lethal and abs(r.z - z) < radius
                   for r in self._records)

    def prune(self, behind_z: float) -> int:
        """Drop records strictly behind behind_z; returns how many were dropped."""
        before = len(self._records)
        kept = [r for r in self._records if r.z >= behind_z]
        self._records.clear()
        self._records.extend(kept)
        return before - len(kept)

    def reset(self) -> None:
        self._records.clear()
