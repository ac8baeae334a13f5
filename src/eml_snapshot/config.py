"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 5000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Upload limits
    max_upload_size_mb: int = Field(default=20, gt=0)

    # Rendering
    max_capture_height: int = Field(default=16384, gt=0)  # pixels
    offline_mode: bool = False
    jpeg_quality: int = Field(default=90, ge=1, le=100)

    # Browser session
    max_concurrent_renders: int = Field(default=4, gt=0)
    render_queue_timeout_seconds: float = 30.0
    browser_launch_timeout_ms: int = 30000
    shutdown_grace_seconds: float = 10.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()
