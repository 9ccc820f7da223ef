"""
LevelScope — Pattern Detection Engine

Rule-based mining of recurring behavior from the reaction log.
Success rates are fixed heuristics, not fitted.

Rules (all additive, a log can match several):
  Repeated Bounces    ≥2 bounces at one level      75 + 5·count
  Breakout-Retest     breakout then bounce, same    85
                      level, adjacent in the log
  Uptrend             ≥2 resistance breakouts       70 + 5·count
  Downtrend           ≥2 support breakouts          70 + 5·count
  Rejection Cluster   ≥3 rejections anywhere        60
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

import structlog

from levelscope.models import (
    RESISTANCE_PREFIX,
    LevelType,
    Pattern,
    PatternKind,
    Reaction,
    ReactionKind,
)

log = structlog.get_logger(__name__)

MIN_REPEATED_BOUNCES = 2
MIN_TREND_BREAKOUTS = 2
MIN_REJECTION_CLUSTER = 3

RETEST_SUCCESS_RATE = 85
REJECTION_SUCCESS_RATE = 60


class PatternDetector:
    """Aggregate the reaction log into named behavioral patterns.

    Usage:
        patterns = PatternDetector().detect(reactions)
    """

    def detect(self, reactions: Sequence[Reaction]) -> tuple[Pattern, ...]:
        """Run every rule over the full log and return a fresh result."""
        patterns = (
            self.repeated_bounces(reactions)
            + self.breakout_retests(reactions)
            + self.trends(reactions)
            + self.rejection_cluster(reactions)
        )
        if patterns:
            log.debug(
                "patterns.detected",
                count=len(patterns),
                names=[p.name for p in patterns],
            )
        return patterns

    # ── Rules ─────────────────────────────────────

    def repeated_bounces(self, reactions: Sequence[Reaction]) -> tuple[Pattern, ...]:
        """One pattern per level with at least two bounces."""
        # Counter keeps first-seen order of level names
        bounces = Counter(
            r.level_name for r in reactions if r.reaction_kind == ReactionKind.BOUNCE
        )
        patterns = []
        for level_name, count in bounces.items():
            if count < MIN_REPEATED_BOUNCES:
                continue
            role = "resistance" if level_name.startswith(RESISTANCE_PREFIX) else "support"
            patterns.append(Pattern(
                kind=PatternKind.REPEATED_BOUNCE,
                name=f"Repeated Bounces at {level_name}",
                occurrences=count,
                success_rate=75 + count * 5,
                description=(
                    f"Price has bounced {count} times at level {level_name}, "
                    f"indicating strong {role}"
                ),
            ))
        return tuple(patterns)

    def breakout_retests(self, reactions: Sequence[Reaction]) -> tuple[Pattern, ...]:
        """One pattern per adjacent (breakout, bounce) pair at the same level."""
        patterns = []
        for prev, cur in zip(reactions, reactions[1:]):
            if (
                prev.reaction_kind == ReactionKind.BREAKOUT
                and cur.reaction_kind == ReactionKind.BOUNCE
                and prev.level_name == cur.level_name
            ):
                patterns.append(Pattern(
                    kind=PatternKind.BREAKOUT_RETEST,
                    name=f"Breakout-Retest at {cur.level_name}",
                    occurrences=1,
                    success_rate=RETEST_SUCCESS_RATE,
                    description=f"Breakout at {cur.level_name} followed by successful retest",
                ))
        return tuple(patterns)

    def trends(self, reactions: Sequence[Reaction]) -> tuple[Pattern, ...]:
        """Uptrend / downtrend from repeated breakouts on one side."""
        breakouts = Counter(
            r.level_type for r in reactions if r.reaction_kind == ReactionKind.BREAKOUT
        )
        patterns = []

        up = breakouts[LevelType.RESISTANCE]
        if up >= MIN_TREND_BREAKOUTS:
            patterns.append(Pattern(
                kind=PatternKind.UPTREND,
                name="Uptrend - Sequential Resistance Breaks",
                occurrences=up,
                success_rate=70 + up * 5,
                description=f"Strong uptrend with {up} resistance levels broken",
            ))

        down = breakouts[LevelType.SUPPORT]
        if down >= MIN_TREND_BREAKOUTS:
            patterns.append(Pattern(
                kind=PatternKind.DOWNTREND,
                name="Downtrend - Sequential Support Breaks",
                occurrences=down,
                success_rate=70 + down * 5,
                description=f"Strong downtrend with {down} support levels broken",
            ))

        return tuple(patterns)

    def rejection_cluster(self, reactions: Sequence[Reaction]) -> tuple[Pattern, ...]:
        """Market indecision: many rejections regardless of level."""
        count = sum(1 for r in reactions if r.reaction_kind == ReactionKind.REJECTION)
        if count < MIN_REJECTION_CLUSTER:
            return ()
        return (Pattern(
            kind=PatternKind.REJECTION_CLUSTER,
            name="High Rejection Activity",
            occurrences=count,
            success_rate=REJECTION_SUCCESS_RATE,
            description=f"{count} rejections detected - market indecision or consolidation",
        ),)


def detect_patterns(reactions: Sequence[Reaction]) -> tuple[Pattern, ...]:
    """Functional shortcut for PatternDetector().detect()."""
    return PatternDetector().detect(reactions)
