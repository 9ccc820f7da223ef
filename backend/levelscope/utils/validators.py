"""
LevelScope — Input Validators

Reusable validation helpers for bars and bar sequences.
Raise BarSequenceError (a ValueError) on invalid input so callers can map to
4xx responses.

The OHLC shape (high >= max(open, close), low <= min(open, close)) is taken
on trust from the feed and not checked here.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from levelscope.errors import BarSequenceError, InvalidAnchorError
from levelscope.models import Bar

_PRICE_FIELDS = ("open", "high", "low", "close")


def validate_bar(bar: Bar) -> Bar:
    """Check that every price on *bar* is finite and positive.

    Returns the bar unchanged or raises BarSequenceError.
    """
    for field in _PRICE_FIELDS:
        value = getattr(bar, field)
        if not math.isfinite(value) or value <= 0:
            raise BarSequenceError(
                f"Bar at {bar.time.isoformat()} has invalid {field}: {value!r}"
            )
    if bar.volume is not None and (not math.isfinite(bar.volume) or bar.volume < 0):
        raise BarSequenceError(
            f"Bar at {bar.time.isoformat()} has invalid volume: {bar.volume!r}"
        )
    return bar


def validate_anchor(bar: Bar) -> Bar:
    """Check the bar that levels will be derived from.

    A non-positive (or NaN) high or low raises InvalidAnchorError, as
    LevelCalculator does; other bad prices raise BarSequenceError.
    """
    if not (bar.high > 0 and bar.low > 0):
        raise InvalidAnchorError(bar.high, bar.low)
    return validate_bar(bar)


def validate_next_bar(bar: Bar, previous: Optional[Bar]) -> Bar:
    """Validate *bar* as the successor of *previous* (strictly later time).

    With no previous bar, *bar* is the anchor and goes through
    validate_anchor().
    """
    if previous is None:
        return validate_anchor(bar)
    validate_bar(bar)
    if bar.time <= previous.time:
        raise BarSequenceError(
            f"Bar time {bar.time.isoformat()} is not after "
            f"previous bar time {previous.time.isoformat()}"
        )
    return bar


def validate_bar_sequence(bars: Sequence[Bar], max_bars: Optional[int] = None) -> Sequence[Bar]:
    """Validate a whole sequence: valid prices, strictly increasing time.

    >>> validate_bar_sequence([])
    []
    """
    if max_bars is not None and len(bars) > max_bars:
        raise BarSequenceError(
            f"Sequence of {len(bars)} bars exceeds maximum of {max_bars}"
        )
    previous = None
    for bar in bars:
        validate_next_bar(bar, previous)
        previous = bar
    return bars
