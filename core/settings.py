"""
Tracker Settings

Environment-driven configuration (pydantic-settings). Any field can be set
through an upper-cased environment variable or a local .env file, e.g.
DAYS_AHEAD=14 or LOG_FORMAT=json.
"""

import pytz
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # SQLite file backing the key-value store
    database_path: str = "sports_tracker.db"

    espn_site_base_url: str = "https://site.api.espn.com/apis/site/v2/sports"
    espn_standings_base_url: str = "https://site.api.espn.com/apis/v2/sports"

    # Upstream calls
    http_timeout: int = 10
    retry_max_attempts: int = 2
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    circuit_breaker_threshold: int = 5
    circuit_breaker_timeout: int = 60

    cache_ttl_hours: int = 24

    # Windows, in days unless noted
    days_ahead: int = 30
    big_games_days: int = 7
    games_to_show: int = 5
    refresh_interval_minutes: int = 15
    timezone: str = "US/Eastern"

    max_favorite_teams: int = 10

    log_level: str = "INFO"
    log_format: str = "console"
    service_name: str = "sports-tracker"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        if v.lower() not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return v.lower()

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"unknown timezone {v!r}")
        return v

    @field_validator(
        "retry_max_attempts", "max_favorite_teams", "days_ahead", "big_games_days",
        "games_to_show", "refresh_interval_minutes",
    )
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def cache_ttl_ms(self) -> int:
        """Response cache TTL in milliseconds."""
        return self.cache_ttl_hours * 3_600_000


settings = Settings()
