"""
LevelScope — Pydantic Models

All I/O schemas for the analysis pipeline. Engines return these, the session
hands them to callers, API routes serialize these. Every model is frozen:
pipeline outputs are read-only snapshots replaced wholesale on each run.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────

class LevelType(str, Enum):
    """Side of the anchor a level sits on."""
    RESISTANCE = "resistance"
    SUPPORT = "support"


class ReactionKind(str, Enum):
    """Classified outcome of a bar touching a level."""
    BOUNCE = "bounce"
    BREAKOUT = "breakout"
    REJECTION = "rejection"


class PatternKind(str, Enum):
    """Behavioral pattern families mined from the reaction log."""
    REPEATED_BOUNCE = "repeated_bounce"
    BREAKOUT_RETEST = "breakout_retest"
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    REJECTION_CLUSTER = "rejection_cluster"


class SignalKind(str, Enum):
    """Directional recommendation."""
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


RESISTANCE_PREFIX = "R"
SUPPORT_PREFIX = "S"


# ──────────────────────────────────────────────
# Market Data Models
# ──────────────────────────────────────────────

class Bar(BaseModel):
    """Single OHLC(V) bar."""
    model_config = ConfigDict(frozen=True)

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


# ──────────────────────────────────────────────
# Level Models
# ──────────────────────────────────────────────

class PriceLevel(BaseModel):
    """One named level of a LevelSet."""
    model_config = ConfigDict(frozen=True)

    name: str
    level_type: LevelType
    price: float


class LevelSet(BaseModel):
    """Four resistance and four support levels derived from one anchor bar."""
    model_config = ConfigDict(frozen=True)

    r1: float
    r2: float
    r3: float
    r4: float
    s1: float
    s2: float
    s3: float
    s4: float
    anchor: Bar

    @property
    def resistance(self) -> tuple[PriceLevel, ...]:
        """Resistance levels, lowest (R1) to highest (R4)."""
        return tuple(
            PriceLevel(name=f"{RESISTANCE_PREFIX}{i}", level_type=LevelType.RESISTANCE, price=price)
            for i, price in enumerate((self.r1, self.r2, self.r3, self.r4), start=1)
        )

    @property
    def support(self) -> tuple[PriceLevel, ...]:
        """Support levels, highest (S1) to lowest (S4)."""
        return tuple(
            PriceLevel(name=f"{SUPPORT_PREFIX}{i}", level_type=LevelType.SUPPORT, price=price)
            for i, price in enumerate((self.s1, self.s2, self.s3, self.s4), start=1)
        )

    def levels(self) -> Iterator[PriceLevel]:
        """All eight levels in scan order: R1..R4 then S1..S4."""
        yield from self.resistance
        yield from self.support

    def get(self, name: str) -> PriceLevel:
        """Look up a level by name (e.g. "R2"). Raises KeyError if unknown."""
        for level in self.levels():
            if level.name == name:
                return level
        raise KeyError(name)

    def next_beyond(self, name: str) -> Optional[PriceLevel]:
        """The next level further from the anchor on the same side, if any.

        For resistance that is the next level above, for support the next
        level below.
        """
        level = self.get(name)
        ladder = self.resistance if level.level_type == LevelType.RESISTANCE else self.support
        idx = [lv.name for lv in ladder].index(name)
        if idx + 1 < len(ladder):
            return ladder[idx + 1]
        return None


# ──────────────────────────────────────────────
# Analysis Models
# ──────────────────────────────────────────────

class Reaction(BaseModel):
    """Classified touch of one bar against one level."""
    model_config = ConfigDict(frozen=True)

    level: float
    level_name: str
    level_type: LevelType
    reaction_kind: ReactionKind
    strength: float = Field(ge=0)  # percent distance of close from level; uncapped
    timestamp: datetime


class Pattern(BaseModel):
    """Named behavioral pattern mined from the reaction log."""
    model_config = ConfigDict(frozen=True)

    kind: PatternKind
    name: str
    occurrences: int = Field(ge=1)
    success_rate: float = Field(ge=0)  # static heuristic, not a measured outcome
    description: str


class Signal(BaseModel):
    """Single current trading recommendation."""
    model_config = ConfigDict(frozen=True)

    kind: SignalKind = SignalKind.NEUTRAL
    confidence: float = Field(default=0.0, ge=0, le=100)
    reason: str
    entry: float
    stop_loss: float = 0.0
    take_profit: float = 0.0
    timestamp: datetime


class AnalysisSnapshot(BaseModel):
    """Everything one pipeline run produces."""
    model_config = ConfigDict(frozen=True)

    levels: LevelSet
    reactions: tuple[Reaction, ...] = ()
    patterns: tuple[Pattern, ...] = ()
    signal: Optional[Signal] = None
    bar_count: int = Field(default=0, ge=0)

    def recent_reactions(self, limit: int = 10) -> tuple[Reaction, ...]:
        """Last *limit* reactions, newest first."""
        if limit <= 0:
            return ()
        return tuple(reversed(self.reactions[-limit:]))


# ──────────────────────────────────────────────
# API Models (Request / Response)
# ──────────────────────────────────────────────

class AnalysisRequest(BaseModel):
    """Bars to analyze; the first bar is the anchor."""
    bars: list[Bar] = Field(..., min_length=1)
    strict: bool = False


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str = "1.0.0"
    environment: str = "development"
