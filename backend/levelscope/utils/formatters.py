"""
LevelScope — Shared Formatters

Human-readable formatting for prices, percentages, levels, reactions and
signals. Rounding happens here only; engines keep full precision.
"""

from __future__ import annotations

from datetime import datetime

from levelscope.models import LevelSet, Reaction, Signal, SignalKind


def format_price(value: float, decimals: int = 2) -> str:
    """Format a price with fixed decimals and thousands separators.

    >>> format_price(100.09)
    '100.09'
    >>> format_price(50123.456)
    '50,123.46'
    """
    return f"{value:,.{decimals}f}"


def format_pct(value: float | int, decimals: int = 2, show_sign: bool = False) -> str:
    """Format a value as a percentage with optional sign.

    >>> format_pct(0.00999)
    '0.01%'
    >>> format_pct(12.345, show_sign=True)
    '+12.35%'
    """
    if show_sign and value > 0:
        return f"+{value:.{decimals}f}%"
    return f"{value:.{decimals}f}%"


def format_timestamp(dt: datetime) -> str:
    """Format a bar timestamp.

    >>> format_timestamp(datetime(2024, 1, 15, 9, 35))
    '2024-01-15 09:35:00'
    """
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_levels(levels: LevelSet, decimals: int = 2) -> list[str]:
    """One line per level, highest resistance first, then the anchor range,
    then support from S1 down."""
    lines = [
        f"{lv.name}  {format_price(lv.price, decimals)}"
        for lv in reversed(levels.resistance)
    ]
    lines.append(
        f"Anchor  H {format_price(levels.anchor.high, decimals)}"
        f" / L {format_price(levels.anchor.low, decimals)}"
    )
    lines.extend(
        f"{lv.name}  {format_price(lv.price, decimals)}" for lv in levels.support
    )
    return lines


def format_reaction(reaction: Reaction, decimals: int = 2) -> str:
    """
    >>> from levelscope.models import LevelType, ReactionKind
    >>> r = Reaction(level=100.09, level_name="R1", level_type=LevelType.RESISTANCE,
    ...              reaction_kind=ReactionKind.BOUNCE, strength=0.00999,
    ...              timestamp=datetime(2024, 1, 15, 9, 35))
    >>> format_reaction(r)
    'R1 BOUNCE @ 100.09 (0.01%) 2024-01-15 09:35:00'
    """
    return (
        f"{reaction.level_name} {reaction.reaction_kind.value.upper()}"
        f" @ {format_price(reaction.level, decimals)}"
        f" ({format_pct(reaction.strength)})"
        f" {format_timestamp(reaction.timestamp)}"
    )


def format_signal(signal: Signal, decimals: int = 2) -> str:
    """Single-line summary; risk parameters are omitted for NEUTRAL."""
    if signal.kind == SignalKind.NEUTRAL:
        return f"NEUTRAL - {signal.reason}"
    return (
        f"{signal.kind.value} {signal.confidence:.0f}% - {signal.reason}"
        f" | entry {format_price(signal.entry, decimals)}"
        f" stop {format_price(signal.stop_loss, decimals)}"
        f" target {format_price(signal.take_profit, decimals)}"
    )
