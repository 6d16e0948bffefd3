"""
Application configuration module.
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Configuration
    APP_NAME: str = Field(default="GitHub Release Tracker")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)

    # API Configuration
    API_V1_STR: str = Field(default="/api/v1")

    # GitHub API Configuration
    GITHUB_TOKEN: str = Field(default="")
    GITHUB_API_URL: str = Field(default="https://api.github.com")
    TIMEOUT_SECONDS: float = Field(default=10, gt=0)

    # Tracked repositories, comma separated "owner/name[:branch]" entries
    REPOS: str = Field(default="")

    # Refresh Configuration (seconds)
    REFRESH_INTERVAL: float = Field(default=3600, gt=0)
    REFRESH_TIMEOUT: float = Field(default=60, gt=0)
    FAILURE_THRESHOLD: int = Field(default=3, ge=1)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @property
    def repositories(self) -> List[str]:
        """Configured repository specs, in configuration order."""
        return [spec.strip() for spec in self.REPOS.split(",") if spec.strip()]


# Create settings instance
settings = Settings()
