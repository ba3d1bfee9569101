"""
Application Configuration

Centralized configuration management using Pydantic settings.
Every value has a default so the pipeline works unconfigured.
"""

from typing import List, Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Job Parser"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(False)
    LOG_LEVEL: str = Field("INFO")
    LOG_TO_FILE: bool = Field(False)
    LOG_DIR: str = Field("logs")

    # Static fetching
    HTTP_TIMEOUT_SECONDS: float = Field(30.0, gt=0)
    HTTP_USER_AGENT: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Rendering queue
    RENDER_ENABLED: bool = Field(True)
    RENDER_MAX_CONCURRENT_INSTANCES: int = Field(3, ge=1)
    RENDER_QUEUE_TIMEOUT_SECONDS: int = Field(60, ge=1)
    RENDER_REQUEST_TIMEOUT_SECONDS: int = Field(30, ge=1)
    RENDER_DEFAULT_WAIT_SECONDS: int = Field(5, ge=0)
    RENDER_SHUTDOWN_GRACE_SECONDS: int = Field(30, ge=0)
    CHROME_BINARY_PATH: Optional[str] = Field(None)

    # Comma separated, on top of the built-in list
    RENDER_EXTRA_JS_DOMAINS: str = Field("")

    def get_extra_js_domains(self) -> List[str]:
        """Get additional JavaScript-heavy domains as a list."""
        return [d.strip().lower() for d in self.RENDER_EXTRA_JS_DOMAINS.split(",") if d.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
