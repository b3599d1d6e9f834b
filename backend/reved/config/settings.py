"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from reved.config import settings

    # Access settings
    db_url = settings.POSTGRES_URL
    redis_url = settings.REDIS_URL
    max_interval = settings.SRS_MAX_INTERVAL_DAYS
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings

from reved.enums.api import RateLimitType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "RevEd Kids"
    DEBUG: bool = False

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "reved"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "reved"

    @property
    def POSTGRES_URL(self) -> str:
        """Async PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def POSTGRES_URL_SYNC(self) -> str:
        """Sync PostgreSQL connection URL for maintenance scripts."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis (recommendation cache + session store)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Session header carrying the Redis session id
    SESSION_HEADER_NAME: str = "X-Session-Token"

    # ===========================================
    # Rate limiting (slowapi limit strings)
    # ===========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_ATTEMPTS: str = "60/minute"
    RATE_LIMIT_RECOMMENDATIONS: str = "30/minute"

    def get_rate_limit(self, rate_limit_type: RateLimitType) -> str:
        """Return the slowapi limit string for an endpoint category."""
        limits = {
            RateLimitType.DEFAULT: self.RATE_LIMIT_DEFAULT,
            RateLimitType.ATTEMPTS: self.RATE_LIMIT_ATTEMPTS,
            RateLimitType.RECOMMENDATIONS: self.RATE_LIMIT_RECOMMENDATIONS,
        }
        return limits.get(rate_limit_type, self.RATE_LIMIT_DEFAULT)

    # ===========================================
    # Spaced repetition (SM-2 variant)
    # ===========================================
    SRS_INITIAL_EASE_FACTOR: float = 2.5
    SRS_MIN_EASE_FACTOR: float = 1.3
    SRS_MAX_EASE_FACTOR: float = 3.0
    SRS_EASE_BONUS: float = 0.1  # Added after a successful review
    SRS_EASE_PENALTY: float = 0.2  # Removed after a failed review
    SRS_INITIAL_INTERVAL_DAYS: int = 1
    SRS_MAX_INTERVAL_DAYS: int = 180

    # ===========================================
    # Progress status rules
    # ===========================================
    MASTERY_MIN_SUCCESSES: int = 3
    MASTERY_MIN_RATE: float = 0.80
    REMEDIATION_MIN_ATTEMPTS: int = 5
    REMEDIATION_MAX_RATE: float = 0.50

    # Student level = 1 + total_points // LEVEL_POINTS_STEP
    LEVEL_POINTS_STEP: int = 100

    # ===========================================
    # Recommendations
    # ===========================================
    RECOMMENDATION_DEFAULT_LIMIT: int = 10
    RECOMMENDATION_MAX_LIMIT: int = 50
    RECOMMENDATION_CANDIDATE_MULTIPLIER: int = 2
    RECOMMENDATION_CACHE_TTL: int = 900  # 15 minutes
    RECOMMENDATION_WEAK_SUBJECT_RATE: float = 0.70
    RECOMMENDATION_WEAK_SUBJECT_BONUS: float = 2.0
    RECOMMENDATION_ORDER_HORIZON: int = 10
    RECOMMENDATION_REMEDIATION_PENALTY: float = 2.0
    RECOMMENDATION_JITTER: float = 2.0

    # Progress listing
    PROGRESS_DEFAULT_LIMIT: int = 50
    PROGRESS_MAX_LIMIT: int = 200

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
