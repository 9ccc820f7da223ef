"""
LevelScope — API Routes

HTTP adapter for presentation clients. Thin layer: validates the bar
sequence, delegates to the AnalysisPipeline and serializes the snapshot.
"""

from __future__ import annotations

import time as _time

from fastapi import APIRouter, Request

from levelscope.config import get_settings
from levelscope.engines.level_engine import LevelCalculator
from levelscope.engines.pipeline import AnalysisPipeline
from levelscope.models import AnalysisRequest, Bar, HealthCheck
from levelscope.utils.formatters import format_levels, format_reaction, format_signal
from levelscope.utils.validators import validate_anchor, validate_bar_sequence

APP_START_TIME: float = _time.monotonic()

# ──────────────────────────────────────────────
# Health
# ──────────────────────────────────────────────

health_router = APIRouter()


@health_router.get("/health")
async def health_check():
    """Liveness check with environment and uptime."""
    settings = get_settings()
    health = HealthCheck(environment=settings.app_env)
    return {
        **health.model_dump(),
        "uptime_seconds": round(_time.monotonic() - APP_START_TIME, 1),
    }


# ──────────────────────────────────────────────
# Analysis
# ──────────────────────────────────────────────

analysis_router = APIRouter()


@analysis_router.post("/levels")
async def compute_levels(anchor: Bar, request: Request):
    """Levels for a single anchor bar, with display lines."""
    settings = get_settings()
    request.state.bar_count = 1
    validate_anchor(anchor)
    levels = LevelCalculator().calculate(anchor)
    return {
        "levels": levels.model_dump(mode="json"),
        "display": format_levels(levels, settings.price_decimals),
    }


@analysis_router.post("/analysis")
async def run_analysis(req: AnalysisRequest, request: Request):
    """Full pipeline over the submitted bars; bars[0] is the anchor."""
    settings = get_settings()
    request.state.bar_count = len(req.bars)
    bars = validate_bar_sequence(req.bars, max_bars=settings.max_request_bars)

    snapshot = AnalysisPipeline().run(bars, strict=req.strict)
    recent = snapshot.recent_reactions(settings.recent_reactions_limit)
    decimals = settings.price_decimals

    return {
        **snapshot.model_dump(mode="json"),
        "recent_reactions": [r.model_dump(mode="json") for r in recent],
        "display": {
            "levels": format_levels(snapshot.levels, decimals),
            "reactions": [format_reaction(r, decimals) for r in recent],
            "signal": format_signal(snapshot.signal, decimals),
        },
    }
