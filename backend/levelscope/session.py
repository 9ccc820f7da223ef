"""
LevelScope — Trading Session

The caller-owned state of one analysis session: the anchor bar and the
growing bar history. The engines themselves keep nothing between runs; the
session hands them an immutable snapshot of its bars on every analyze().

Single writer: one feed appends bars. A concurrent host must serialize
append() and analyze() itself; the session does no locking.
"""

from __future__ import annotations

from typing import Iterable, Optional

import structlog

from levelscope.engines.pipeline import AnalysisPipeline
from levelscope.models import AnalysisSnapshot, Bar
from levelscope.utils.validators import validate_anchor, validate_next_bar

log = structlog.get_logger(__name__)


class TradingSession:
    """Bar history anchored on its first bar.

    Usage:
        session = TradingSession()
        session.append(bar)
        snapshot = session.analyze()
    """

    def __init__(
        self,
        bars: Optional[Iterable[Bar]] = None,
        pipeline: Optional[AnalysisPipeline] = None,
    ):
        self._bars: list[Bar] = []
        self._pipeline = pipeline or AnalysisPipeline()
        if bars is not None:
            self.extend(bars)

    # ── State ──

    @property
    def anchor(self) -> Optional[Bar]:
        """The bar all levels are derived from (first bar of the session)."""
        return self._bars[0] if self._bars else None

    @property
    def latest(self) -> Optional[Bar]:
        return self._bars[-1] if self._bars else None

    def __len__(self) -> int:
        return len(self._bars)

    def snapshot(self) -> tuple[Bar, ...]:
        """Immutable copy of the current history."""
        return tuple(self._bars)

    # ── Feed ──

    def append(self, bar: Bar) -> None:
        """Add the next bar. Its time must be strictly after the latest bar."""
        validate_next_bar(bar, self.latest)
        self._bars.append(bar)

    def extend(self, bars: Iterable[Bar]) -> None:
        for bar in bars:
            self.append(bar)

    def reset(self, anchor: Optional[Bar] = None) -> None:
        """Start a new session, optionally anchored on *anchor*.

        The previous history is discarded; the next analyze() derives an
        entirely new LevelSet. An invalid *anchor* raises before anything
        is discarded.
        """
        if anchor is not None:
            validate_anchor(anchor)
        dropped = len(self._bars)
        self._bars = [anchor] if anchor is not None else []
        log.info(
            "session.reset",
            dropped_bars=dropped,
            anchor_time=anchor.time.isoformat() if anchor else None,
        )

    # ── Analysis ──

    def analyze(self, strict: bool = False) -> Optional[AnalysisSnapshot]:
        """Run the full pipeline over the current history."""
        return self._pipeline.run(self.snapshot(), strict=strict)
