"""Application settings with Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    app_mode: Literal["development", "production"] = Field(
        default="development",
        alias="APP_MODE",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "silent"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )

    # Classification thresholds
    bot_threshold: float = Field(default=7.0, alias="SLEUTH_BOT_THRESHOLD")
    ai_threshold: float = Field(default=6.0, alias="SLEUTH_AI_THRESHOLD")
    human_threshold: float = Field(default=-2.0, alias="SLEUTH_HUMAN_THRESHOLD")

    # Profile lookups
    profile_base_url: str = Field(
        default="https://www.reddit.com",
        alias="SLEUTH_PROFILE_BASE_URL",
    )
    user_agent: str = Field(default="slopsleuth/0.1", alias="SLEUTH_USER_AGENT")
    profile_ok_ttl: float = Field(default=6 * 60 * 60, alias="SLEUTH_PROFILE_OK_TTL")
    profile_fail_ttl: float = Field(default=10 * 60, alias="SLEUTH_PROFILE_FAIL_TTL")
    profile_min_interval: float = Field(default=1.2, alias="SLEUTH_PROFILE_MIN_INTERVAL")
    rate_limit_backoff: float = Field(default=60.0, alias="SLEUTH_RATE_LIMIT_BACKOFF")
    profile_cache_path: Path | None = Field(default=None, alias="SLEUTH_PROFILE_CACHE_PATH")

    # Linear model
    use_model: bool = Field(default=True, alias="SLEUTH_USE_MODEL")
    ml_ai_threshold: float = Field(default=0.84, alias="SLEUTH_ML_AI_THRESHOLD")
    ml_ai_bonus: float = Field(default=3.0, alias="SLEUTH_ML_AI_BONUS")

    # Near-duplicate history bounds
    history_max_identities: int = Field(default=5000, alias="SLEUTH_HISTORY_MAX_IDENTITIES")
    history_max_fingerprints: int = Field(default=200, alias="SLEUTH_HISTORY_MAX_FINGERPRINTS")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_mode == "production"

    @property
    def is_silent(self) -> bool:
        """Check if logging should be suppressed."""
        return self.log_level == "silent"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
