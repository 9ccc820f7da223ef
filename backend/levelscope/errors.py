"""
LevelScope — Error Taxonomy

Structural input errors halt a pipeline run. They subclass ValueError so
callers can map them to 4xx responses the same way as other bad input.
Empty history and "no signal" are normal outcomes, not errors.
"""

from __future__ import annotations


class LevelScopeError(ValueError):
    """Base class for all LevelScope input errors."""


class InvalidAnchorError(LevelScopeError):
    """Anchor bar has a non-positive high or low."""

    def __init__(self, high: float, low: float):
        self.high = high
        self.low = low
        super().__init__(
            f"Anchor bar must have positive high and low (high={high}, low={low})"
        )


class DegenerateLevelError(LevelScopeError):
    """A computed level is non-positive or non-finite."""

    def __init__(self, name: str, value: float):
        self.name = name
        self.value = value
        super().__init__(f"Level {name} is degenerate: {value!r}")


class InsufficientHistoryError(LevelScopeError):
    """Fewer bars than a strict caller requires.

    The default pipeline treats short history as an empty result; this is
    only raised when strict checking is requested.
    """

    def __init__(self, count: int, required: int = 2):
        self.count = count
        self.required = required
        super().__init__(f"Need at least {required} bars, got {count}")


class BarSequenceError(LevelScopeError):
    """Bar sequence violates ordering or price constraints."""
