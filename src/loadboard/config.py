"""Configuration management for the Loadboard service."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    APP_NAME: str = "Loadboard"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==========================================================================
    # Database
    # ==========================================================================
    DATABASE_URL: str = "sqlite:///data/loadboard.db"

    # ==========================================================================
    # Identity provider (hosted auth)
    # ==========================================================================
    AUTH_BASE_URL: Optional[str] = Field(default=None, description="Base URL of the hosted auth service")
    AUTH_API_KEY: Optional[str] = Field(default=None, description="Public API key for the auth service")
    AUTH_TIMEOUT: float = 10.0
    AUTH_RESET_REDIRECT_URL: Optional[str] = Field(default=None, description="Page the password recovery email links to")

    # ==========================================================================
    # Routing (distance / duration between coordinates)
    # ==========================================================================
    ROUTING_ENABLED: bool = True
    ROUTING_BASE_URL: str = "https://router.project-osrm.org"
    ROUTING_TIMEOUT: float = 5.0

    # ==========================================================================
    # Business Rules
    # ==========================================================================
    DEFAULT_COUNTRY_CODE: str = "+966"
    COMMISSION_RATE: float = 0.10

    # Count shippers as total_users - total_drivers instead of by role
    STATS_DERIVE_SHIPPERS: bool = False

    # ==========================================================================
    # API server
    # ==========================================================================
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ==========================================================================
    # Validation
    # ==========================================================================
    def validate_auth_keys(self) -> bool:
        """Check if the identity provider is configured."""
        return bool(self.AUTH_BASE_URL and self.AUTH_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
