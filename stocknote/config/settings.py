"""
STOCKNOTE - Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataSourceSettings(BaseSettings):
    """Quote provider API keys, endpoints and history window."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    fmp_api_key: str = ""
    fmp_base_url: str = "https://financialmodelingprep.com"
    poll_timeout_seconds: float = 10.0
    history_lookback_days: int = 365
    history_cache_ttl_seconds: int = 300  # raw history revalidation window


class CacheSettings(BaseSettings):
    """Snapshot cache sizing and the timezone that defines a calendar day."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_prefix="CACHE_")

    max_snapshots: int = 5000
    timezone: str = "UTC"


class ChartSettings(BaseSettings):
    """Chart projection defaults."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_prefix="CHART_")

    default_range: str = "3M"


class DatabaseSettings(BaseSettings):
    """Database configuration."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    db_url: str = Field(default="sqlite+aiosqlite:///stocknote.db", validation_alias="DATABASE_URL")
    use_database: bool = False
    echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")


class AppSettings(BaseSettings):
    """Top-level application settings."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "STOCKNOTE"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    data: DataSourceSettings = Field(default_factory=DataSourceSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    chart: ChartSettings = Field(default_factory=ChartSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


def load_settings() -> AppSettings:
    """Build a fresh settings object. The caller owns its lifecycle."""
    return AppSettings()
