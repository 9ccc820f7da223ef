"""
LevelScope — Level Engine

Derives the eight anchor levels. Each step widens the previous offset and
compounds on the prior level, so the outer levels are only reached by larger
moves:

    R1 = A + A*0.0009      S1 = B - B*0.0009
    R2 = R1 + R1*0.0018    S2 = S1 - S1*0.0018
    R3 = R2 + R2*0.0036    S3 = S2 - S2*0.0036
    R4 = R3 + R3*0.0072    S4 = S3 - S3*0.0072

No rounding is applied here; presentation rounds for display only.
"""

from __future__ import annotations

import math

import structlog

from levelscope.errors import DegenerateLevelError, InvalidAnchorError
from levelscope.models import Bar, LevelSet

log = structlog.get_logger(__name__)

# Step multipliers, each double the previous
LEVEL_STEPS = (0.0009, 0.0018, 0.0036, 0.0072)


class LevelCalculator:
    """Compute a LevelSet from one anchor bar.

    Usage:
        levels = LevelCalculator().calculate(first_bar)
    """

    def __init__(self, steps: tuple[float, ...] = LEVEL_STEPS):
        self.steps = steps

    def calculate(self, anchor: Bar) -> LevelSet:
        """Build the resistance ladder above the anchor high and the support
        ladder below the anchor low.

        Raises:
            InvalidAnchorError: anchor high or low is not positive.
            DegenerateLevelError: a computed level is not finite and positive.
        """
        if not (anchor.high > 0 and anchor.low > 0):
            raise InvalidAnchorError(anchor.high, anchor.low)

        resistance = self._ladder(anchor.high, direction=1)
        support = self._ladder(anchor.low, direction=-1)

        names = [f"R{i}" for i in range(1, 5)] + [f"S{i}" for i in range(1, 5)]
        for name, value in zip(names, resistance + support):
            if not math.isfinite(value) or value <= 0:
                raise DegenerateLevelError(name, value)

        levels = LevelSet(
            r1=resistance[0],
            r2=resistance[1],
            r3=resistance[2],
            r4=resistance[3],
            s1=support[0],
            s2=support[1],
            s3=support[2],
            s4=support[3],
            anchor=anchor,
        )
        log.debug(
            "levels.computed",
            anchor_high=anchor.high,
            anchor_low=anchor.low,
            r1=levels.r1,
            s1=levels.s1,
        )
        return levels

    def _ladder(self, base: float, direction: int) -> list[float]:
        ladder = []
        current = base
        for step in self.steps:
            current = current + direction * current * step
            ladder.append(current)
        return ladder


def calculate_levels(anchor: Bar) -> LevelSet:
    """Functional shortcut for LevelCalculator().calculate()."""
    return LevelCalculator().calculate(anchor)
