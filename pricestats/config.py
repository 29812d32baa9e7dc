"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., PRICESTATS_REFRESH__STALE_AFTER_SECONDS=600)

Enabled overlays and the display range are defaults only: the caller owns
the live values and passes them to the coordinator explicitly.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pricestats.series.types import LONGEST_LOOKBACK, OverlayKind, TimeRange

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class RefreshConfig(BaseModel):
    """Cache staleness and history-depth thresholds."""

    stale_after_seconds: int = Field(default=3600, ge=60, le=86_400)
    min_history_days: int = Field(default=LONGEST_LOOKBACK)

    @field_validator("min_history_days")
    @classmethod
    def validate_min_history_days(cls, v: int) -> int:
        if v < LONGEST_LOOKBACK:
            raise ValueError(
                f"min_history_days must cover the longest overlay lookback "
                f"({LONGEST_LOOKBACK} days), got {v}"
            )
        return v


class ProviderConfig(BaseModel):
    """Remote series provider (CoinGecko-compatible) settings."""

    base_url: str = "https://api.coingecko.com"
    coin_id: str = "bitcoin"
    vs_currency: str = "usd"
    timeout_seconds: float = Field(default=15.0, gt=0, le=120)
    api_key: str = ""

    @field_validator("vs_currency", "coin_id")
    @classmethod
    def lowercase(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("must not be empty")
        return v


class DisplayConfig(BaseModel):
    """Initial display range and overlay selection."""

    default_range: TimeRange = TimeRange.MONTH
    default_overlays: frozenset[OverlayKind] = Field(
        default=frozenset({OverlayKind.MA_200_WEEK, OverlayKind.SUPPORT_BAND}),
    )


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        PRICESTATS_LOG_LEVEL=DEBUG
        PRICESTATS_PROVIDER__COIN_ID=ethereum
        PRICESTATS_DISPLAY__DEFAULT_RANGE=1Y
        PRICESTATS_DISPLAY__DEFAULT_OVERLAYS='["50-Day MA","200-Day MA"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="PRICESTATS_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    refresh: RefreshConfig = RefreshConfig()
    provider: ProviderConfig = ProviderConfig()
    display: DisplayConfig = DisplayConfig()
    db_path: str = "data/pricestats.db"
    db_busy_timeout_ms: int = 5000

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v
