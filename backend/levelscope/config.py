"""
LevelScope — Configuration Management

Pydantic Settings: loads from .env, validates all configuration at startup.
Algorithm constants (level multipliers, tolerances, heuristic rates) are not
settings; they live beside the engines that use them.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Core ──
    app_env: str = "development"
    app_debug: bool = True

    # ── Logging ──
    log_level: str = "INFO"
    log_json: bool = False  # JSON lines instead of the console renderer

    # ── Pipeline ──
    history_warn_bars: int = Field(default=5000, ge=2)  # full recompute cost grows with history
    max_request_bars: int = Field(default=20000, ge=2)
    recent_reactions_limit: int = Field(default=10, ge=1)

    # ── Presentation ──
    price_decimals: int = Field(default=2, ge=0, le=10)

    # ── CORS ──
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance, created once."""
    return Settings()
