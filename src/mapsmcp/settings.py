from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration.

    The Google Maps credential is intentionally absent: it is read from
    GOOGLE_MAPS_API_KEY on every provider call.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: str = "logs"

    cors_origins: str = "*"

    maps_base_url: str = "https://maps.googleapis.com/maps/api"
    maps_request_timeout_seconds: float | None = None

    redis_url: str | None = None
    session_ttl_seconds: int = 0  # 0 keeps sessions until terminate

    shutdown_grace_seconds: float = 0.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Return the application settings singleton (loaded from env / .env)."""
    global _SETTINGS
    try:
        return _SETTINGS
    except NameError:
        _SETTINGS = Settings()
        return _SETTINGS
