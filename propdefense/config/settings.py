import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Defense rank band
    weak_rank_min: int = Field(
        24, ge=1, description="Lowest rank (inclusive) counted as a weak defense."
    )
    weak_rank_max: int = Field(
        32, ge=1, description="Highest rank (inclusive) counted as a weak defense."
    )
    rank_scale_max: int = Field(
        32, ge=1, description="Number of teams ranked; ranks above this are invalid."
    )

    # Page interaction timing
    locator_timeout_ms: int = Field(
        3000, ge=0, description="Timeout for a single locator click attempt."
    )
    filter_settle_ms: int = Field(
        2000, ge=0, description="Wait after a position filter was activated."
    )
    content_settle_ms: int = Field(
        1000, ge=0, description="Wait before taking a page snapshot."
    )
    container_poll_attempts: int = Field(
        3, ge=1, description="Snapshots taken while waiting for the ranking container."
    )
    container_poll_interval_s: float = Field(
        0.5, ge=0, description="Seconds between container snapshots."
    )

    # PrizePicks
    prizepicks_api_url: str = Field(
        "https://api.prizepicks.com/projections",
        description="PrizePicks projections endpoint.",
    )
    prizepicks_league_id: str = Field("7", description="PrizePicks NHL league id.")
    prizepicks_cookie: Optional[str] = Field(
        None, description="Optional cookie string sent to PrizePicks."
    )
    request_timeout_s: float = Field(30.0, gt=0, description="HTTP timeout.")

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        if settings.weak_rank_min > settings.weak_rank_max:
            raise ValueError(
                f"WEAK_RANK_MIN ({settings.weak_rank_min}) is above WEAK_RANK_MAX ({settings.weak_rank_max})"
            )
        if settings.weak_rank_max > settings.rank_scale_max:
            raise ValueError(
                f"WEAK_RANK_MAX ({settings.weak_rank_max}) is above RANK_SCALE_MAX ({settings.rank_scale_max})"
            )
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
