"""
LevelScope — Logging & Tracing

structlog configuration plus a lightweight timing span used around pipeline
stages.

Usage:
  1. Call configure_logging() once at process start (the API factory does).
  2. Wrap expensive blocks:
        with trace_span("reaction_engine.classify", bars=len(bars)):
            reactions = classifier.classify(bars, levels)
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Optional

import structlog

from levelscope.config import get_settings

logger = structlog.get_logger(__name__)

# Spans slower than this are logged at warning level
SLOW_SPAN_SECONDS = 1.0


# ──────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────

def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Configure structlog processors and the minimum log level.

    Falls back to LOG_LEVEL / LOG_JSON from settings when arguments are None.
    Production defaults to JSON lines.
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    use_json = (settings.log_json or settings.is_production) if json_logs is None else json_logs

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )

    logger.debug("logging_configured", level=level_name, json=use_json)


# ──────────────────────────────────────────────
# Manual Tracing
# ──────────────────────────────────────────────

@contextmanager
def trace_span(name: str, **metadata: Any):
    """Context manager timing a code block.

    Logs the elapsed time at debug level and warns when the block takes
    longer than SLOW_SPAN_SECONDS.

    Args:
        name: Name of the span (e.g., "pattern_engine.detect").
        **metadata: Extra key/value context attached to the log events.
    """
    start = time.perf_counter()
    logger.debug("trace_span_start", span_name=name, **metadata)
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug(
            "trace_span_end",
            span_name=name,
            elapsed_ms=round(elapsed * 1000, 2),
            **metadata,
        )
        if elapsed > SLOW_SPAN_SECONDS:
            logger.warning("trace_span_slow", span_name=name, elapsed_s=round(elapsed, 2), **metadata)

