"""Runtime configuration for the bookstore service.

All values come from environment variables (or a local ``.env`` file).
In a deployment only ``DATABASE_URI`` normally needs to be set; the
remaining settings have defaults that match the docker-compose setup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    database_uri: str = "mongodb://localhost:27017"
    database_name: str = "exercise-1"
    collection_name: str = "information"
    connect_timeout_ms: int = 10_000
    # Upper bound for every storage call made while serving a request
    operation_timeout_ms: int = 5_000

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3030
    log_level: str = "INFO"

    templates_dir: Path = PACKAGE_DIR / "templates"
    static_dir: Path = PACKAGE_DIR / "static"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
