"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Remote REST service (json-server compatible)
    API_BASE_URL: str = "http://localhost:3000"
    API_TIMEOUT_SECONDS: float = 5.0

    # Security
    SECRET_KEY: str = "super-secret-key-change-me"  # change in production

    # Application
    TIMEZONE: str = "Europe/Madrid"
    CURRENCY: str = "USD"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_api_base_url(self) -> str:
        """Base URL without trailing slash"""
        return self.API_BASE_URL.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
