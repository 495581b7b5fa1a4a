"""Scorecard engine settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.quality.models import JoinPolicy


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Process-wide settings loaded from environment variables / .env file.

    Only engine defaults live here; which tables and columns to assess is
    always passed in explicitly by the caller.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Outlier detection ---
    OUTLIER_SIGMA: float = Field(
        default=3.0,
        gt=0.0,
        description="Outlier threshold in standard deviations from the mean.",
    )
    STDDEV_DDOF: int = Field(
        default=0,
        ge=0,
        le=1,
        description="Delta degrees of freedom: 0 = population, 1 = sample.",
    )

    # --- Profiling ---
    PROFILE_JOIN_POLICY: JoinPolicy = Field(
        default=JoinPolicy.STRICT,
        description="Key reconciliation across profiling sub-measures.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
