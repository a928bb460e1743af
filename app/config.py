"""Configuration management for the example application."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="EXAMPLE_APP_")

    # App settings
    app_name: str = "GitHub Repositories"
    debug: bool = False

    # GitHub API
    github_api_base_url: str = "https://api.github.com/"
    github_user: str = "maxkagamine"
    github_accept: str = "application/vnd.github.v3+json"
    user_agent: str = "HttpClientFactory-Sample"
    request_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
