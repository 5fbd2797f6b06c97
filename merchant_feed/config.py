"""Configuration management using pydantic-settings."""
from functools import lru_cache
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedSettings(BaseSettings):
    """Feed engine configuration loaded from environment variables.

    All settings prefixed with FEED_ (e.g., FEED_GRACE_PERIOD_DAYS=5)
    """

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    timezone: str = Field(
        default="America/Fortaleza",
        description="IANA zone used by the system clock for schedule evaluation",
    )

    # -------------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------------
    grace_period_days: int = Field(
        default=5,
        ge=0,
        le=60,
        description="Days past the due date a non-trial merchant stays visible",
    )

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------
    absent_open_flag_means_open: bool = Field(
        default=True,
        description="Treat a merchant without a manual open flag as open",
    )
    overnight_carry_over: bool = Field(
        default=True,
        description="Also honour yesterday's window when it crosses midnight",
    )

    # -------------------------------------------------------------------------
    # Ranking
    # -------------------------------------------------------------------------
    unrated_rating: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=5.0,
        description="Rating assumed for new merchants; None sorts them after rated ones",
    )
    missing_breakdown_value: float = Field(
        default=5.0,
        ge=0.0,
        le=5.0,
        description="Breakdown score assumed when a merchant has no rating breakdown",
    )
    fuzzy_min_query_length: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Fuzzy fallback only runs for queries longer than this",
    )

    # -------------------------------------------------------------------------
    # Delivery labels
    # -------------------------------------------------------------------------
    currency_symbol: str = Field(default="R$", description="Prefix for formatted prices")
    free_label: str = Field(default="Grátis", description="Label for free delivery")
    select_location_label: str = Field(
        default="Ver Taxa",
        description="Placeholder shown until the consumer picks a neighborhood",
    )
    on_request_label: str = Field(
        default="A Consultar",
        description="Label when the merchant does not price the consumer's neighborhood",
    )

    model_config = SettingsConfigDict(
        env_prefix="FEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject zone names the tz database cannot resolve."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> FeedSettings:
    """Get cached settings instance."""
    return FeedSettings()
