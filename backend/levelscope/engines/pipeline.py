"""
LevelScope — Analysis Pipeline

Runs the four engines in sequence over a complete bar history:

    anchor bar            → LevelSet
    (bars, levels)        → reactions
    reactions             → patterns
    (last bar, levels, reactions, patterns) → signal

Every run is a full recomputation; nothing is kept between calls.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from levelscope.config import get_settings
from levelscope.engines.level_engine import LevelCalculator
from levelscope.engines.pattern_engine import PatternDetector
from levelscope.engines.reaction_engine import MIN_BARS, ReactionClassifier
from levelscope.engines.signal_engine import SignalSynthesizer
from levelscope.errors import InsufficientHistoryError
from levelscope.models import AnalysisSnapshot, Bar
from levelscope.observability import trace_span

log = structlog.get_logger(__name__)


class AnalysisPipeline:
    """Level → reaction → pattern → signal, over one bar sequence.

    Usage:
        snapshot = AnalysisPipeline().run(bars)
    """

    def __init__(
        self,
        calculator: Optional[LevelCalculator] = None,
        classifier: Optional[ReactionClassifier] = None,
        detector: Optional[PatternDetector] = None,
        synthesizer: Optional[SignalSynthesizer] = None,
    ):
        self.calculator = calculator or LevelCalculator()
        self.classifier = classifier or ReactionClassifier()
        self.detector = detector or PatternDetector()
        self.synthesizer = synthesizer or SignalSynthesizer()

    def run(self, bars: Sequence[Bar], strict: bool = False) -> Optional[AnalysisSnapshot]:
        """Analyze *bars*; bars[0] is the anchor.

        Returns None for an empty sequence. With *strict* set, fewer than two
        bars raises InsufficientHistoryError instead.

        Raises:
            InvalidAnchorError / DegenerateLevelError: from level calculation.
        """
        if strict and len(bars) < MIN_BARS:
            raise InsufficientHistoryError(len(bars), MIN_BARS)
        if not bars:
            return None

        settings = get_settings()
        if len(bars) > settings.history_warn_bars:
            log.warning(
                "history.large",
                bars=len(bars),
                threshold=settings.history_warn_bars,
            )

        with trace_span("pipeline.run", bars=len(bars)):
            levels = self.calculator.calculate(bars[0])
            reactions = self.classifier.classify(bars, levels)
            patterns = self.detector.detect(reactions)
            signal = self.synthesizer.synthesize(bars[-1], levels, reactions, patterns)

        log.info(
            "pipeline.complete",
            bars=len(bars),
            reactions=len(reactions),
            patterns=len(patterns),
            signal=signal.kind.value,
            confidence=signal.confidence,
        )

        return AnalysisSnapshot(
            levels=levels,
            reactions=reactions,
            patterns=patterns,
            signal=signal,
            bar_count=len(bars),
        )


def analyze(bars: Sequence[Bar], strict: bool = False) -> Optional[AnalysisSnapshot]:
    """Functional shortcut for AnalysisPipeline().run()."""
    return AnalysisPipeline().run(bars, strict=strict)
