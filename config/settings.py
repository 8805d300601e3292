"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # WEBFLOW
    # ===================
    webflow_api_token: Optional[str] = Field(
        None,
        description="Default Webflow API token (used when a session is opened without one)"
    )
    webflow_api_base_url: str = Field(
        default="https://api.webflow.com/v2",
        description="Webflow Data API base URL"
    )
    webflow_api_version: str = Field(
        default="2.0.0",
        description="Value sent in the accept-version header"
    )
    webflow_request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout in seconds for a single Webflow request"
    )

    # ===================
    # IMPORT THROTTLING
    # ===================
    items_page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items per listing page (Webflow maximum is 100)"
    )
    write_interval_seconds: float = Field(
        default=0.2,
        ge=0,
        le=10,
        description="Minimum seconds between item create/update calls"
    )
    page_interval_seconds: float = Field(
        default=0.15,
        ge=0,
        le=10,
        description="Minimum seconds between item listing pages"
    )
    preview_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Rows included in dry-run previews and upload samples"
    )

    # ===================
    # IN-MEMORY STATE
    # ===================
    upload_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Minutes a parsed upload stays available for import"
    )
    session_ttl_minutes: int = Field(
        default=480,
        ge=5,
        le=10080,
        description="Minutes an idle CMS session stays open"
    )
    max_upload_mb: int = Field(
        default=25,
        ge=1,
        le=500,
        description="Maximum accepted upload size in MB"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:8888",
        ],
        description="Origins allowed to call the API from a browser"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def max_upload_bytes(self) -> int:
        """Upload size limit in bytes."""
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
