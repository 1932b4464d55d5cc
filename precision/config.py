from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HandicapSettings(BaseSettings):
    """Handicap profile parameters. Override with HANDICAP_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="HANDICAP_", env_file=".env", extra="ignore")

    # A shooter averaging this per series gets handicap 0.
    reference_series_score: Decimal = Decimal("48.0")
    max_handicap_per_series: Decimal = Decimal("10.0")
    required_matches: int = Field(default=5, ge=1)
    rolling_window_match_count: int = Field(default=10, ge=1)
    provisional_averages: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "Klass 1 - Nybörjare": Decimal("44.0"),
            "Klass 2 - Guldmärkesskytt": Decimal("46.0"),
            "Klass 3 - Riksmästare": Decimal("48.0"),
        }
    )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PRECISION_", env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


@lru_cache()
def get_settings() -> AppSettings:
    return AppSettings()


@lru_cache()
def get_handicap_settings() -> HandicapSettings:
    return HandicapSettings()
