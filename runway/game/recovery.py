# runway/game/recovery.py
from __future__ import annotations
import logging
from typing import Iterable, Optional

from runway.game.config import RECOVERY_ZONE_LENGTH
from runway.game.diagnostics import DiagnosticEvent, Diagnostics
from runway.game.models import ObstaclePlacement

logger = logging.getLogger(__name__)


class RecoveryZoneEnforcer:
    """
    Keeps the runway empty for RECOVERY_ZONE_LENGTH after each Palisade so the
    player has room after the minigame. Collectibles are not affected.
    """

    def __init__(self, diagnostics: Optional[Diagnostics] = None,
                 length: float = RECOVERY_ZONE_LENGTH):
        self.diagnostics = diagnostics
        self.length = length
        self.clear_until: Optional[float] = None

    def register(self, placements: Iterable[ObstaclePlacement]) -> None:
        for p in placements:
            if not p.type.triggers_minigame:
                continue
            end = p.z + self.length
            if self.clear_until is None or end > self.clear_until:
                self.clear_until = end
            logger.debug(f"Recovery zone from z={p.z:.2f} until z={self.clear_until:.2f}")
            if self.diagnostics is not None:
                self.diagnostics.emit(DiagnosticEvent.RECOVERY_ZONE_STARTED,
                                      z=p.z, clear_until=self.clear_until)

    def is_blocking(self, cursor_z: float) -> bool:
        """Inclusive at clear_until, so nothing lands in (p, p + length]."""
        return self.clear_until is not None and cursor_z <= self.clear_until

    def reset(self) -> None:
        self.clear_until = None
