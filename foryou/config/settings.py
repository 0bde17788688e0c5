"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are loaded here - no hardcoded values.
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "For You Ranking API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Feature Flags
    PERSONALIZATION_ENABLED: bool = True
    KILL_SWITCH_ACTIVE: bool = False

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True

    # Timeouts (milliseconds) - per signal source
    SIGNAL_JOIN_TIMEOUT_MS: int = 250
    SUPPRESSION_TIMEOUT_MS: int = 250
    AFFINITY_TIMEOUT_MS: int = 400

    # Circuit Breaker (config store)
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = 5
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC: int = 30

    # Ranking config
    RANKING_CONFIG_KEY: str = "fyp_weights"
    RANKING_CONFIG_TTL_SEC: int = 60
    RECS_ADMIN_USER_IDS: str = ""

    # Pagination
    DEFAULT_FEED_LIMIT: int = 20
    MAX_FEED_LIMIT: int = 50

    # Candidate pool
    POOL_OVERSAMPLE_FACTOR: int = 3
    POOL_MIN_SIZE: int = 60

    # Suppression windows (hours)
    SUPPRESSION_WINDOW_HOURS: int = 24
    CREATOR_COOLDOWN_WINDOW_HOURS: int = 4

    # Affinity sampling
    AFFINITY_LOOKBACK_DAYS: int = 30
    AFFINITY_SEED_LIMIT: int = 50
    CO_ENGAGEMENT_SAMPLE_LIMIT: int = 500

    # Experiment reporting
    EXPOSURE_SUMMARY_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def admin_user_ids(self) -> List[str]:
        """Viewer ids allowed to edit ranking config."""
        return [uid.strip() for uid in self.RECS_ADMIN_USER_IDS.split(",") if uid.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
