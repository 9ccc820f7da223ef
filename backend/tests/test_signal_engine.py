"""
LevelScope — Signal Engine Tests

Proximity rules, momentum override, and rule precedence.
Levels come from the reference anchor {high: 100, low: 99}.
"""

from datetime import datetime, timedelta

import pytest

from levelscope.engines.level_engine import calculate_levels
from levelscope.engines.signal_engine import (
    NEUTRAL_REASON,
    MomentumRule,
    SignalSynthesizer,
    SupportProximityRule,
    generate_signal,
)
from levelscope.models import (
    Bar,
    Pattern,
    PatternKind,
    Reaction,
    ReactionKind,
    SignalKind,
)

BASE = datetime(2024, 1, 15, 9, 30)
ANCHOR = Bar(time=BASE, open=99.5, high=100.0, low=99.0, close=99.8)
LEVELS = calculate_levels(ANCHOR)

UPTREND = Pattern(
    kind=PatternKind.UPTREND,
    name="Uptrend - Sequential Resistance Breaks",
    occurrences=2,
    success_rate=80,
    description="Strong uptrend with 2 resistance levels broken",
)
DOWNTREND = Pattern(
    kind=PatternKind.DOWNTREND,
    name="Downtrend - Sequential Support Breaks",
    occurrences=2,
    success_rate=80,
    description="Strong downtrend with 2 support levels broken",
)


def _bar(close: float) -> Bar:
    return Bar(
        time=BASE + timedelta(hours=1),
        open=close,
        high=close * 1.0002,
        low=close * 0.9998,
        close=close,
    )


def _reaction(name: str, kind: ReactionKind, strength: float = 0.1) -> Reaction:
    level = LEVELS.get(name)
    return Reaction(
        level=level.price,
        level_name=name,
        level_type=level.level_type,
        reaction_kind=kind,
        strength=strength,
        timestamp=BASE,
    )


NEAR_SUPPORT = 98.95      # within 0.2% of S1 (98.9109)
NEAR_RESISTANCE = 100.05  # within 0.2% of R1 (100.09)
MID_RANGE = 99.5          # near nothing


# ═══════════════════════════════════════════════
#  NEUTRAL
# ═══════════════════════════════════════════════


class TestNeutral:

    def test_no_reactions(self):
        bar = _bar(MID_RANGE)
        signal = generate_signal(bar, LEVELS, [], [])
        assert signal.kind == SignalKind.NEUTRAL
        assert signal.confidence == 0
        assert signal.reason == NEUTRAL_REASON
        assert signal.entry == MID_RANGE
        assert signal.timestamp == bar.time

    def test_near_support_without_confirmation(self):
        reactions = [_reaction("S1", ReactionKind.BOUNCE)]
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.NEUTRAL

    def test_confirmation_away_from_levels(self):
        reactions = [_reaction("S1", ReactionKind.BOUNCE)] * 3
        signal = generate_signal(_bar(MID_RANGE), LEVELS, reactions, [UPTREND])
        assert signal.kind == SignalKind.NEUTRAL


# ═══════════════════════════════════════════════
#  SUPPORT PROXIMITY → BUY
# ═══════════════════════════════════════════════


class TestSupportProximity:

    def test_buy_on_bounces(self):
        reactions = [_reaction("S1", ReactionKind.BOUNCE)] * 2
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.BUY
        assert signal.confidence == 80
        assert signal.entry == NEAR_SUPPORT
        assert signal.stop_loss == pytest.approx(LEVELS.s1 * 0.997)
        assert signal.take_profit == LEVELS.r1
        assert "2 recent bounces" in signal.reason

    def test_buy_on_uptrend_alone(self):
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, [], [UPTREND])
        assert signal.kind == SignalKind.BUY
        assert signal.confidence == 75

    def test_confidence_capped(self):
        reactions = [_reaction("S1", ReactionKind.BOUNCE)] * 5
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [UPTREND])
        assert signal.confidence == 95

    def test_only_last_five_reactions_count(self):
        reactions = (
            [_reaction("S1", ReactionKind.BOUNCE)] * 2
            + [_reaction("S2", ReactionKind.REJECTION)] * 5
        )
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.NEUTRAL

    def test_resistance_bounces_do_not_count(self):
        reactions = [_reaction("R1", ReactionKind.BOUNCE)] * 2
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.NEUTRAL


# ═══════════════════════════════════════════════
#  RESISTANCE PROXIMITY → SELL
# ═══════════════════════════════════════════════


class TestResistanceProximity:

    def test_sell_on_rejections(self):
        reactions = [_reaction("R1", ReactionKind.REJECTION)] * 2
        signal = generate_signal(_bar(NEAR_RESISTANCE), LEVELS, reactions, [])
        assert signal.kind == SignalKind.SELL
        assert signal.confidence == 80
        assert signal.stop_loss == pytest.approx(LEVELS.r1 * 1.003)
        assert signal.take_profit == LEVELS.s1
        assert "2 recent rejections" in signal.reason

    def test_sell_on_downtrend_alone(self):
        signal = generate_signal(_bar(NEAR_RESISTANCE), LEVELS, [], [DOWNTREND])
        assert signal.kind == SignalKind.SELL
        assert signal.confidence == 75

    def test_uptrend_does_not_trigger_sell(self):
        signal = generate_signal(_bar(NEAR_RESISTANCE), LEVELS, [], [UPTREND])
        assert signal.kind == SignalKind.NEUTRAL


# ═══════════════════════════════════════════════
#  MOMENTUM
# ═══════════════════════════════════════════════


class TestMomentum:

    def test_resistance_breakout_buy(self):
        reactions = [_reaction("R1", ReactionKind.BREAKOUT, strength=0.2)]
        signal = generate_signal(_bar(100.3), LEVELS, reactions, [])
        assert signal.kind == SignalKind.BUY
        assert signal.confidence == pytest.approx(70.4)
        assert signal.entry == 100.3
        assert signal.stop_loss == pytest.approx(LEVELS.r1 * 0.998)
        assert signal.take_profit == LEVELS.r2
        assert "R1" in signal.reason

    def test_top_resistance_target(self):
        reactions = [_reaction("R4", ReactionKind.BREAKOUT, strength=0.5)]
        signal = generate_signal(_bar(101.9), LEVELS, reactions, [])
        assert signal.take_profit == pytest.approx(LEVELS.r4 * 1.01)

    def test_support_breakdown_sell(self):
        reactions = [_reaction("S2", ReactionKind.BREAKOUT, strength=1.0)]
        signal = generate_signal(_bar(97.7), LEVELS, reactions, [])
        assert signal.kind == SignalKind.SELL
        assert signal.confidence == pytest.approx(72)
        assert signal.stop_loss == pytest.approx(LEVELS.s2 * 1.002)
        assert signal.take_profit == LEVELS.s3

    def test_bottom_support_target(self):
        reactions = [_reaction("S4", ReactionKind.BREAKOUT, strength=0.3)]
        signal = generate_signal(_bar(97.0), LEVELS, reactions, [])
        assert signal.take_profit == pytest.approx(LEVELS.s4 * 0.99)

    def test_confidence_capped(self):
        reactions = [_reaction("R1", ReactionKind.BREAKOUT, strength=15)]
        signal = generate_signal(_bar(115.0), LEVELS, reactions, [])
        assert signal.confidence == 90

    def test_only_latest_reaction_considered(self):
        reactions = [
            _reaction("R1", ReactionKind.BREAKOUT),
            _reaction("R2", ReactionKind.BOUNCE),
        ]
        signal = generate_signal(_bar(MID_RANGE), LEVELS, reactions, [])
        assert signal.kind == SignalKind.NEUTRAL


# ═══════════════════════════════════════════════
#  PRECEDENCE
# ═══════════════════════════════════════════════


class TestPrecedence:

    def test_breakout_overrides_support_buy(self):
        reactions = [
            _reaction("S1", ReactionKind.BOUNCE),
            _reaction("S1", ReactionKind.BOUNCE),
            _reaction("R1", ReactionKind.BREAKOUT, strength=0.2),
        ]
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.BUY
        assert signal.reason.startswith("Resistance breakout")
        assert signal.take_profit == LEVELS.r2

    def test_breakdown_contradicts_support_buy(self):
        reactions = [
            _reaction("S1", ReactionKind.BOUNCE),
            _reaction("S1", ReactionKind.BOUNCE),
            _reaction("S2", ReactionKind.BREAKOUT, strength=0.2),
        ]
        signal = generate_signal(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.SELL
        assert signal.reason.startswith("Support breakdown")

    def test_custom_rule_order(self):
        reactions = [
            _reaction("S1", ReactionKind.BOUNCE),
            _reaction("S1", ReactionKind.BOUNCE),
            _reaction("S2", ReactionKind.BREAKOUT, strength=0.2),
        ]
        synthesizer = SignalSynthesizer(rules=[MomentumRule(), SupportProximityRule()])
        signal = synthesizer.synthesize(_bar(NEAR_SUPPORT), LEVELS, reactions, [])
        assert signal.kind == SignalKind.BUY

    def test_exactly_one_signal(self):
        reactions = [_reaction("S1", ReactionKind.BOUNCE)] * 2
        signal = SignalSynthesizer().synthesize(_bar(NEAR_SUPPORT), LEVELS, reactions, [UPTREND])
        assert signal.kind in (SignalKind.BUY, SignalKind.SELL, SignalKind.NEUTRAL)
        assert 0 <= signal.confidence <= 100
