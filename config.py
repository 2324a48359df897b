"""
Parity - Platform Metadata Comparison
"""
from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Info
    APP_NAME: str = "Parity"
    APP_VERSION: str = "1.2.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Comparison
    DEFAULT_MAX_DEPTH: int = 10          # Values list hierarchy levels compared
    PARALLEL_COMPARISON: bool = True     # One worker thread per category
    MAX_WORKERS: Optional[int] = Field(default=None, ge=1)  # None lets the executor size the pool

    # CORS - comma-separated list of allowed origins, or "*" for all (not recommended)
    # Example: "https://parity.example.com,https://admin.example.com"
    CORS_ORIGINS: str = "*"

    # Allowed hosts for Host header validation (comma-separated, or "*" to disable)
    ALLOWED_HOSTS: str = "*"

    # Maximum request body size in bytes (snapshots of large instances run to tens of MB)
    MAX_REQUEST_SIZE: int = 50 * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
