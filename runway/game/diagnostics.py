# runway/game/diagnostics.py
"""
Diagnostic events raised by the generator.

Every event is logged, then handed to subscribers in registration order.
Subscribers are plain callables taking (event, payload).
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticEvent(str, Enum):
    PATTERN_SPAWNED = "pattern-spawned"
    PATTERN_CLEARANCE_FAILED = "pattern-clearance-failed"
    FALLBACK_TO_RANDOM = "fallback-to-random"
    PATTERN_REJECTED_UNSOLVABLE = "pattern-rejected-unsolvable"
    REACTION_TIME_BELOW_FLOOR = "reaction-time-below-floor"
    LANE_RESAMPLE_EXHAUSTED = "lane-resample-exhausted"
    ROW_SUBSTITUTED = "row-substituted"
    RECOVERY_ZONE_STARTED = "recovery-zone-started"


# Log level per event
_LEVELS = {
    DiagnosticEvent.PATTERN_SPAWNED: logging.DEBUG,
    DiagnosticEvent.PATTERN_CLEARANCE_FAILED: logging.DEBUG,
    DiagnosticEvent.FALLBACK_TO_RANDOM: logging.INFO,
    DiagnosticEvent.PATTERN_REJECTED_UNSOLVABLE: logging.WARNING,
    DiagnosticEvent.REACTION_TIME_BELOW_FLOOR: logging.WARNING,
    DiagnosticEvent.LANE_RESAMPLE_EXHAUSTED: logging.INFO,
    DiagnosticEvent.ROW_SUBSTITUTED: logging.ERROR,
    DiagnosticEvent.RECOVERY_ZONE_STARTED: logging.DEBUG,
}

Listener = Callable[[DiagnosticEvent, Dict[str, Any]], None]


class Diagnostics:
    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def emit(self, event: DiagnosticEvent, **payload: Any) -> None:
        logger.log(_LEVELS.get(event, logging.INFO), f"{event.value} {payload}")
        for listener in list(self._listeners):
            listener(event, payload)


class EventRecorder:
    """Listener that keeps every event; handy in tests and audits."""

    def __init__(self, diagnostics: Optional[Diagnostics] = None):
        self.events: List[tuple] = []
        if diagnostics is not None:
            diagnostics.subscribe(self)

    def __call__(self, event: DiagnosticEvent, payload: Dict[str, Any]) -> None:
        self.events.append((event, payload))

    def count(self, event: DiagnosticEvent) -> int:
        return sum(1 for e, _ in self.events if e is event)
