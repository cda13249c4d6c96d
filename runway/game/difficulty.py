# runway/game/difficulty.py
from __future__ import annotations
import logging
from typing import NamedTuple, Optional

from runway.game.config import MIN_REACTION_TIME_S
from runway.game.diagnostics import DiagnosticEvent, Diagnostics
from runway.game.level_config import LevelConfiguration

logger = logging.getLogger(__name__)


class SpacingEnvelope(NamedTuple):
    min_spacing: float
    max_spacing: float


def resolve_effective_speed(config: LevelConfiguration, base_speed: float,
                            sprint_multiplier: float = 1.0) -> float:
    """Forward speed for this frame, never above the level's cap."""
    raw = base_speed * sprint_multiplier * config.speed_multiplier
    return max(0.0, min(raw, config.max_effective_speed))


def resolve_spacing_envelope(config: LevelConfiguration) -> SpacingEnvelope:
    return SpacingEnvelope(config.min_obstacle_spacing, config.max_obstacle_spacing)


def reaction_time(config: LevelConfiguration) -> float:
    """Seconds between two obstacles at the tightest spacing and the top speed."""
    return config.min_obstacle_spacing / config.max_effective_speed


def check_reaction_time(config: LevelConfiguration,
                        diagnostics: Optional[Diagnostics] = None) -> bool:
    """False (plus a warning) when the level leaves less than the minimum reaction time."""
    rt = reaction_time(config)
    if rt >= MIN_REACTION_TIME_S:
        return True
    logger.warning(f"Level {config.level_number}: reaction time {rt:.3f}s "
                   f"below floor {MIN_REACTION_TIME_S}s")
    if diagnostics is not None:
        diagnostics.emit(DiagnosticEvent.REACTION_TIME_BELOW_FLOOR,
                         level=config.level_number, reaction_time=rt)
    return False
