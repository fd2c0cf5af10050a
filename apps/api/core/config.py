"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
Engine tunables live next to service settings so every call site
(case analytics, dashboard alerts, reports, parent summary) reads the
same thresholds and window sizes.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Trend classification
    # Rates are fractions: 0.10 == 10 percentage points.
    RATE_TREND_THRESHOLD: float = Field(default=0.10, gt=0, lt=1)
    PROMPT_TREND_THRESHOLD: float = Field(default=0.5, gt=0, le=3)

    # Window sizes (sessions per window)
    CASE_WINDOW_SESSIONS: int = Field(default=4, ge=1)      # case insights, child trend
    DECLINE_WINDOW_SESSIONS: int = Field(default=2, ge=1)   # dashboard decline scan
    PARENT_WINDOW_SESSIONS: int = Field(default=3, ge=1)    # parent summary

    # Insights
    MAX_INSIGHTS: int = Field(default=5, ge=1)
    INSIGHT_MIN_TRIALS: int = Field(default=2, ge=1)
    MASTERY_RATE: float = Field(default=0.80, gt=0, le=1)
    MASTERY_MAX_PROMPT_LEVEL: int = Field(default=1, ge=0, le=3)
    PROBLEM_BEHAVIOR_ALERT_COUNT: int = Field(default=4, ge=0)

    # Dashboard
    DASHBOARD_RECENT_DAYS: int = Field(default=7, ge=1)

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    CORS_ORIGINS: Optional[str] = Field(default=None)


# Global settings instance
settings = Settings()


def validate_production_config(
    environment: str,
    debug: bool,
    cors_origins: Optional[str],
    rate_threshold: float = 0.10,
    mastery_rate: float = 0.80,
) -> None:
    """
    Refuse to start in production with unsafe or inconsistent settings.

    Raises ValueError with the offending setting's name. Non-production
    environments are not checked.
    """
    if environment != "production":
        return

    if debug:
        raise ValueError("DEBUG must be False in production")
    if not cors_origins or not cors_origins.strip():
        raise ValueError("CORS_ORIGINS must be set in production")
    if rate_threshold >= mastery_rate:
        raise ValueError("RATE_TREND_THRESHOLD must be below MASTERY_RATE")
