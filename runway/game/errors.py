# runway/game/errors.py
from __future__ import annotations
from typing import Optional


class ConfigurationError(ValueError):
    """Malformed level configuration. Fatal at level load."""


class InvalidPatternError(ValueError):
    """A pattern failed validation. Rejected at load, never raised out of the library."""

    def __init__(self, pattern_name: Optional[str], reason: str):
        self.pattern_name = pattern_name
        self.reason = reason
        super().__init__(f"pattern {pattern_name!r}: {reason}")


class GenerationFallback(Exception):
    """Raised inside a scheduler tick when a pattern cannot be placed."""

    def __init__(self, pattern_name: str, reason: str):
        self.pattern_name = pattern_name
        self.reason = reason
        super().__init__(f"{pattern_name}: {reason}")
