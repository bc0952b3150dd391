"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Redis (optional analytics store backend)
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "analytics:"

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # CORS Settings
    # Comma-separated list of allowed origins, e.g. "https://app.example.com"
    cors_origins: str = ""

    # Analytics engine
    analytics_max_events_per_user: int = 1000
    analytics_recent_window_days: int = 30
    analytics_min_data_points_for_pattern: int = 10
    analytics_pattern_confidence_threshold: float = 0.7
    analytics_max_recommendations: int = 3
    analytics_refresh_mode: Literal["eager", "deferred"] = "eager"
    analytics_content_focus: Literal["deterministic", "weighted"] = "deterministic"
    analytics_improvement_focus_probability: float = 0.7
    analytics_random_seed: int | None = None

    # Feature Flags (can also be set via FF_* env vars)
    ff_use_redis_analytics_store: bool = False
    ff_enable_concept_enrichment: bool = False

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list.

        Returns:
            List of allowed origins. In development, includes localhost.
            In production, only returns explicitly configured origins.
        """
        if self.cors_origins:
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if self.is_development:
            return [
                "http://localhost:3000",
                "http://localhost:8000",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:8000",
            ]
        return []


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
