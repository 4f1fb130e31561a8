# worthline/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging verbosity and output format
- REPORTING_CURRENCY: Default currency for valuations when the caller
  does not request one explicitly
- DEFAULT_GRANULARITY: Default downsampling for history queries

Configuration is validated on application startup. Invalid configuration
will raise a ValueError with a descriptive message.

Usage:
    from worthline.config import settings

    currency = settings.reporting_currency
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Worthline")
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - REPORTING_CURRENCY: ISO 4217 code used when none is requested
        - DEFAULT_GRANULARITY: History granularity when none is requested
        - CURRENCY_DECIMALS: Optional rounding applied to reported values
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format (text for humans, json for aggregators)"
    )

    reporting_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Default reporting currency (ISO 4217)"
    )

    default_granularity: str = Field(
        default="none",
        description="Default history granularity (none, hourly, daily, weekly, monthly, yearly)"
    )

    currency_decimals: int | None = Field(
        default=None,
        ge=0,
        le=12,
        description="Round reported values to this many decimals (unset = exact)"
    )

    app_name: str = "Worthline"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def normalize_reporting_currency(self) -> "Settings":
        """
        Upper-case the reporting currency and make sure it is alphabetic.

        Currency comparisons inside the engine are case-insensitive, but
        the reported `currency` field echoes this value verbatim.
        """
        code = self.reporting_currency.strip().upper()
        if not code.isalpha():
            raise ValueError(
                f"REPORTING_CURRENCY must be a 3-letter ISO 4217 code, got: {self.reporting_currency!r}"
            )
        object.__setattr__(self, "reporting_currency", code)
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
