"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with GEEV_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="GEEV_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Storage ---
    storage_backend: str = "memory"  # "memory" or "redis"
    redis_url: str = "redis://localhost:6379/0"
    state_storage_key: str = "geev_app_state"
    theme_storage_key: str = "theme"
    auth_storage_key: str = "geev_auth"
    drafts_storage_key: str = "geev_drafts"
    persist_debounce_seconds: float = 0.1

    # --- Analytics ---
    analytics_endpoint: str = "http://localhost:3000/api/analytics/events"
    analytics_timeout_seconds: float = 2.0
    analytics_enabled: bool = True
    analytics_max_event_bytes: int = 10_000
    metrics_cache_ttl_seconds: int = 300  # 5 minutes
    analytics_max_events: int = 100_000

    # --- JWT ---
    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30

    # --- Leaderboard ---
    leaderboard_max_limit: int = 100


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
