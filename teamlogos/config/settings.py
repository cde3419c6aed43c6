import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Anon key for the Supabase project."
    )
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key for Supabase (use with caution!)."
    )
    storage_bucket: str = Field(
        "team-logos", description="Supabase Storage bucket holding team logos."
    )

    # Logo Providers
    api_sports_key: Optional[str] = Field(
        None, description="API key for API-Sports (primary, paid provider)."
    )
    api_sports_base_url: str = "https://v3.football.api-sports.io"
    thesportsdb_api_key: str = Field(
        "3", description="TheSportsDB key; '3' is the public free-tier key."
    )
    thesportsdb_base_url: str = "https://www.thesportsdb.com/api/v1/json"
    http_timeout_seconds: float = Field(30.0, gt=0)

    # Cache Configuration
    cache_file: str = Field(
        ".cache/logo_cache.json", description="JSON file backing the local logo cache."
    )
    cache_ttl_seconds: int = Field(7 * 24 * 60 * 60, gt=0)

    # Logo Handling
    local_logo_base: str = Field(
        "/assets/logos", description="Base path of the locally bundled logo assets."
    )
    max_logo_bytes: int = Field(5 * 1024 * 1024, gt=0)
    download_attempts: int = Field(3, ge=1, le=10)

    # Batch Settings
    resolve_delay_ms: int = Field(200, ge=0)
    migrate_delay_ms: int = Field(1500, ge=0)

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

    @property
    def supabase_api_key(self) -> Optional[str]:
        """Service key when present (admin tooling needs write access), else anon key."""
        return self.supabase_service_key or self.supabase_key


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in VALID_LOG_LEVELS:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
