"""
LevelScope — Logging & Config Tests
"""

from datetime import datetime, timedelta

import structlog
from structlog.testing import capture_logs

from levelscope.config import Settings, get_settings
from levelscope.engines.pipeline import analyze
from levelscope.main import create_app
from levelscope.models import Bar
from levelscope.observability import configure_logging, trace_span


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.history_warn_bars == 5000
        assert settings.recent_reactions_limit == 10
        assert settings.price_decimals == 2
        assert not settings.is_production

    def test_cors_origin_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origin_list == ["http://a.test", "http://b.test"]


class TestProduction:

    def setup_method(self):
        get_settings.cache_clear()

    def teardown_method(self):
        get_settings.cache_clear()
        configure_logging()

    def test_debug_forced_off(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("APP_DEBUG", "true")
        assert get_settings().is_production
        assert create_app().debug is False

    def test_debug_allowed_outside_production(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        monkeypatch.setenv("APP_DEBUG", "true")
        assert create_app().debug is True

    def test_json_logs_by_default(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("LOG_JSON", "false")
        configure_logging()
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)


class TestLogging:

    def setup_method(self):
        configure_logging(level="DEBUG", json_logs=True)

    def teardown_method(self):
        configure_logging()

    def test_trace_span_events(self):
        with capture_logs() as logs:
            with trace_span("unit.block", bars=3):
                pass
        events = [e["event"] for e in logs]
        assert events == ["trace_span_start", "trace_span_end"]
        assert logs[1]["span_name"] == "unit.block"
        assert logs[1]["bars"] == 3
        assert "elapsed_ms" in logs[1]

    def test_pipeline_logs_completion(self):
        base = datetime(2024, 1, 15, 9, 30)
        bars = [
            Bar(time=base, open=99.5, high=100.0, low=99.0, close=99.8),
            Bar(time=base + timedelta(minutes=5), open=100.05, high=100.12, low=99.95, close=100.10),
        ]
        with capture_logs() as logs:
            analyze(bars)
        complete = [e for e in logs if e["event"] == "pipeline.complete"]
        assert len(complete) == 1
        assert complete[0]["reactions"] == 1
        assert complete[0]["signal"] == "NEUTRAL"
