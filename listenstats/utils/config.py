# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings for the listener store."""

    model_config = SettingsConfigDict(env_prefix="PG_")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="listenstats", description="PostgreSQL username")
    password: str = Field(default="", description="PostgreSQL password")
    database: str = Field(default="listenstats", description="Database name")
    schema_name: str = Field(default="listenstats", description="Schema name")
    sslmode: str = Field(default="prefer", description="SSL mode")

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection string."""
        return (
            f"postgresql://{self.user}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
        )


class GeoIPSettings(BaseSettings):
    """MaxMind GeoIP2/GeoLite2 database settings."""

    model_config = SettingsConfigDict(env_prefix="GEOIP_")

    database_path: Optional[Path] = Field(
        default=None, description="Path to a GeoLite2-City or GeoIP2-City .mmdb file"
    )

    @property
    def is_configured(self) -> bool:
        """Check if a readable database file is configured."""
        return bool(self.database_path and self.database_path.is_file())


class ReportSettings(BaseSettings):
    """Listener report settings."""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    batch_size: int = Field(
        default=250, description="Listener rows fetched per round-trip to PostgreSQL"
    )
    long_execution_seconds: int = Field(
        default=1800, description="Time budget for a single report in seconds"
    )
    default_locale: str = Field(
        default="en_US", description="Locale for place names when the request has none"
    )
    temp_dir: Optional[Path] = Field(
        default=None, description="Directory for CSV exports (system temp dir if unset)"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    geoip: GeoIPSettings = Field(default_factory=GeoIPSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
