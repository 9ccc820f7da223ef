"""
LevelScope — Signal Engine

Combines the latest bar, the level set, the reaction log and the detected
patterns into exactly one trading signal.

Rules are evaluated in fixed priority order and the last rule that fires
wins:

  1. SupportProximityRule     close near support + bounces/uptrend  → BUY
  2. ResistanceProximityRule  close near resistance + rejections/downtrend → SELL
  3. MomentumRule             latest reaction is a breakout → breakout direction

The momentum rule replaces a proximity call from the same evaluation even
when it points the other way. When nothing fires the signal is NEUTRAL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import structlog

from levelscope.models import (
    Bar,
    LevelSet,
    LevelType,
    Pattern,
    PatternKind,
    PriceLevel,
    Reaction,
    ReactionKind,
    Signal,
    SignalKind,
)

log = structlog.get_logger(__name__)

RECENT_WINDOW = 5
PROXIMITY_PCT = 0.002
MIN_CONFIRMATIONS = 2

NEUTRAL_REASON = "No clear signal - monitoring price action"


@dataclass(frozen=True)
class SignalContext:
    """Inputs shared by every rule."""
    bar: Bar
    levels: LevelSet
    reactions: tuple[Reaction, ...]
    patterns: tuple[Pattern, ...]

    @property
    def price(self) -> float:
        return self.bar.close

    @property
    def recent(self) -> tuple[Reaction, ...]:
        return self.reactions[-RECENT_WINDOW:]

    def has_pattern(self, kind: PatternKind) -> bool:
        return any(p.kind == kind for p in self.patterns)

    def near(self, ladder: Sequence[PriceLevel]) -> Optional[PriceLevel]:
        """First level in ladder order within PROXIMITY_PCT of the close."""
        for level in ladder:
            if abs(self.price - level.price) / level.price < PROXIMITY_PCT:
                return level
        return None

    def recent_count(self, level_type: LevelType, kind: ReactionKind) -> int:
        return sum(
            1 for r in self.recent
            if r.level_type == level_type and r.reaction_kind == kind
        )


class SignalRule(Protocol):
    """A rule returns a Signal when its trigger condition holds."""

    name: str

    def evaluate(self, ctx: SignalContext) -> Optional[Signal]: ...


# ──────────────────────────────────────────────
# Rules
# ──────────────────────────────────────────────

class SupportProximityRule:
    """BUY near support after repeated support bounces or in an uptrend."""

    name = "support_proximity"

    def evaluate(self, ctx: SignalContext) -> Optional[Signal]:
        support = ctx.near(ctx.levels.support)
        if support is None:
            return None

        bounces = ctx.recent_count(LevelType.SUPPORT, ReactionKind.BOUNCE)
        uptrend = ctx.has_pattern(PatternKind.UPTREND)
        if bounces < MIN_CONFIRMATIONS and not uptrend:
            return None

        return Signal(
            kind=SignalKind.BUY,
            confidence=min(95, 60 + bounces * 10 + (15 if uptrend else 0)),
            reason=f"Price near support {support.price:.2f} with {bounces} recent bounces",
            entry=ctx.price,
            stop_loss=support.price * 0.997,
            take_profit=ctx.levels.r1,
            timestamp=ctx.bar.time,
        )


class ResistanceProximityRule:
    """SELL near resistance after repeated rejections or in a downtrend."""

    name = "resistance_proximity"

    def evaluate(self, ctx: SignalContext) -> Optional[Signal]:
        resistance = ctx.near(ctx.levels.resistance)
        if resistance is None:
            return None

        rejections = ctx.recent_count(LevelType.RESISTANCE, ReactionKind.REJECTION)
        downtrend = ctx.has_pattern(PatternKind.DOWNTREND)
        if rejections < MIN_CONFIRMATIONS and not downtrend:
            return None

        return Signal(
            kind=SignalKind.SELL,
            confidence=min(95, 60 + rejections * 10 + (15 if downtrend else 0)),
            reason=f"Price near resistance {resistance.price:.2f} with {rejections} recent rejections",
            entry=ctx.price,
            stop_loss=resistance.price * 1.003,
            take_profit=ctx.levels.s1,
            timestamp=ctx.bar.time,
        )


class MomentumRule:
    """Follow a breakout in the most recent reaction."""

    name = "momentum"

    def evaluate(self, ctx: SignalContext) -> Optional[Signal]:
        if not ctx.recent:
            return None
        last = ctx.recent[-1]
        if last.reaction_kind != ReactionKind.BREAKOUT:
            return None

        confidence = min(90, 70 + last.strength * 2)
        beyond = ctx.levels.next_beyond(last.level_name)

        if last.level_type == LevelType.RESISTANCE:
            return Signal(
                kind=SignalKind.BUY,
                confidence=confidence,
                reason=f"Resistance breakout at {last.level_name} - momentum continuation",
                entry=ctx.price,
                stop_loss=last.level * 0.998,
                take_profit=beyond.price if beyond else last.level * 1.01,
                timestamp=ctx.bar.time,
            )

        return Signal(
            kind=SignalKind.SELL,
            confidence=confidence,
            reason=f"Support breakdown at {last.level_name} - momentum continuation",
            entry=ctx.price,
            stop_loss=last.level * 1.002,
            take_profit=beyond.price if beyond else last.level * 0.99,
            timestamp=ctx.bar.time,
        )


DEFAULT_RULES: tuple[SignalRule, ...] = (
    SupportProximityRule(),
    ResistanceProximityRule(),
    MomentumRule(),
)


# ──────────────────────────────────────────────
# Synthesizer
# ──────────────────────────────────────────────

class SignalSynthesizer:
    """Apply the signal rules in priority order; last applicable rule wins.

    Usage:
        signal = SignalSynthesizer().synthesize(bar, levels, reactions, patterns)
    """

    def __init__(self, rules: Sequence[SignalRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def synthesize(
        self,
        bar: Bar,
        levels: LevelSet,
        reactions: Sequence[Reaction],
        patterns: Sequence[Pattern],
    ) -> Signal:
        ctx = SignalContext(
            bar=bar,
            levels=levels,
            reactions=tuple(reactions),
            patterns=tuple(patterns),
        )

        signal: Optional[Signal] = None
        fired: list[str] = []
        for rule in self.rules:
            candidate = rule.evaluate(ctx)
            if candidate is not None:
                signal = candidate
                fired.append(rule.name)

        if signal is None:
            signal = Signal(
                kind=SignalKind.NEUTRAL,
                confidence=0,
                reason=NEUTRAL_REASON,
                entry=ctx.price,
                timestamp=bar.time,
            )

        log.debug(
            "signal.generated",
            kind=signal.kind.value,
            confidence=signal.confidence,
            rules_fired=fired,
        )
        return signal


def generate_signal(
    bar: Bar,
    levels: LevelSet,
    reactions: Sequence[Reaction],
    patterns: Sequence[Pattern],
) -> Signal:
    """Functional shortcut for SignalSynthesizer().synthesize()."""
    return SignalSynthesizer().synthesize(bar, levels, reactions, patterns)
