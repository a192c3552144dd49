# =============================================================================
# POSTURELAB BACKEND - CONFIGURATION
# =============================================================================
"""
Configuration management using Pydantic Settings.
Handles environment variables for storage, the landmark detector and the
recommendation engine limits.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Database
    database_url: str = Field(
        default="sqlite:///data/posturelab.db",
        alias="DATABASE_URL"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Assessment history
    history_limit: int = Field(default=50, ge=1, alias="HISTORY_LIMIT")

    # Exercise recommendations
    max_recommendations: int = Field(default=8, ge=1, alias="MAX_RECOMMENDATIONS")

    # Landmark detector (external pose service)
    detector_url: str = Field(
        default="http://127.0.0.1:8003",
        alias="DETECTOR_URL"
    )
    detector_timeout: float = Field(default=10.0, alias="DETECTOR_TIMEOUT")
    min_landmark_confidence: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        alias="MIN_LANDMARK_CONFIDENCE"
    )

    # Uploaded images
    image_dir: str = Field(default="data/images", alias="IMAGE_DIR")

    # Janitor Configuration
    janitor_enabled: bool = Field(default=True, alias="JANITOR_ENABLED")
    image_retention_days: int = Field(default=30, alias="IMAGE_RETENTION_DAYS")
    janitor_schedule_hour: int = Field(default=2, alias="JANITOR_SCHEDULE_HOUR")

    # Frontend origins allowed by CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def database_path(self) -> Path:
        """Filesystem path of the SQLite database."""
        return Path(self.database_url.replace("sqlite:///", ""))

    @property
    def image_path(self) -> Path:
        """Directory where uploaded source images are kept."""
        return Path(self.image_dir)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance for dependency injection."""
    return Settings()
