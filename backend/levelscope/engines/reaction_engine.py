"""
LevelScope — Reaction Engine

Scans every bar after the anchor against all eight levels and classifies each
touch as a bounce, breakout or rejection.

A bar touches a level when its range overlaps a ±0.05% band around it:

    low <= level * 1.0005  and  high >= level * 0.9995

Classification checks run in a fixed order (breakout first, then the
directional check, then the default). The conditions overlap, so the order
decides the result.

The log is rebuilt from scratch on every call.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from levelscope.errors import InsufficientHistoryError
from levelscope.models import (
    Bar,
    LevelSet,
    LevelType,
    PriceLevel,
    Reaction,
    ReactionKind,
)

log = structlog.get_logger(__name__)

TOUCH_TOLERANCE = 0.0005
# Close-through margins for a breakout
BREAKOUT_ABOVE = 1.001
BREAKOUT_BELOW = 0.999
MIN_BARS = 2


class ReactionClassifier:
    """Tag every level touch in a bar sequence.

    Usage:
        reactions = ReactionClassifier().classify(bars, levels)
    """

    def classify(
        self,
        bars: Sequence[Bar],
        levels: LevelSet,
        strict: bool = False,
    ) -> tuple[Reaction, ...]:
        """Classify all touches for bars[1:], in bar order then level order.

        The first bar is the anchor and is never scanned. With fewer than two
        bars the log is empty, or InsufficientHistoryError is raised when
        *strict* is set.
        """
        if len(bars) < MIN_BARS:
            if strict:
                raise InsufficientHistoryError(len(bars), MIN_BARS)
            log.debug("reactions.insufficient_history", bars=len(bars))
            return ()

        scan_levels = tuple(levels.levels())
        reactions = tuple(
            self.classify_touch(bar, level)
            for bar in bars[1:]
            for level in scan_levels
            if self.touches(bar, level.price)
        )

        log.debug(
            "reactions.classified",
            bars=len(bars),
            reactions=len(reactions),
        )
        return reactions

    # ── Rules ─────────────────────────────────────

    @staticmethod
    def touches(bar: Bar, price: float) -> bool:
        """True when the bar range overlaps the tolerance band of *price*."""
        return (
            bar.low <= price * (1 + TOUCH_TOLERANCE)
            and bar.high >= price * (1 - TOUCH_TOLERANCE)
        )

    def classify_touch(self, bar: Bar, level: PriceLevel) -> Reaction:
        """Classify one bar against one level it is known to touch."""
        if level.level_type == LevelType.RESISTANCE:
            kind, strength = self._resistance_reaction(bar, level.price)
        else:
            kind, strength = self._support_reaction(bar, level.price)

        return Reaction(
            level=level.price,
            level_name=level.name,
            level_type=level.level_type,
            reaction_kind=kind,
            strength=abs(strength),
            timestamp=bar.time,
        )

    @staticmethod
    def _resistance_reaction(bar: Bar, price: float) -> tuple[ReactionKind, float]:
        if bar.close > price and bar.high > price * BREAKOUT_ABOVE:
            return ReactionKind.BREAKOUT, (bar.close - price) / price * 100
        if bar.close < bar.open and bar.high >= price:
            return ReactionKind.REJECTION, (price - bar.close) / price * 100
        return ReactionKind.BOUNCE, abs(bar.close - price) / price * 100

    @staticmethod
    def _support_reaction(bar: Bar, price: float) -> tuple[ReactionKind, float]:
        if bar.close < price and bar.low < price * BREAKOUT_BELOW:
            return ReactionKind.BREAKOUT, (price - bar.close) / price * 100
        if bar.close > bar.open and bar.low <= price:
            return ReactionKind.BOUNCE, (bar.close - price) / price * 100
        return ReactionKind.REJECTION, abs(bar.close - price) / price * 100


def classify_reactions(bars: Sequence[Bar], levels: LevelSet) -> tuple[Reaction, ...]:
    """Functional shortcut for ReactionClassifier().classify()."""
    return ReactionClassifier().classify(bars, levels)
