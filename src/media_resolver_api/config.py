"""Configuration settings for the media resolver API."""
import os
from typing import List, Literal


EnvironmentType = Literal["development", "staging", "production"]


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"
    LOG_LEVEL: str = "INFO"

    # Partner API (optional; strategy is skipped when unset)
    RAPIDAPI_KEY: str | None = None
    RAPIDAPI_HOST: str = "instagram-downloader-download-instagram-videos-stories1.p.rapidapi.com"

    # Public aggregators
    COBALT_API_URL: str = "https://api.cobalt.tools/api/json"
    SAVETIK_API_URL: str = "https://savetik.co/api/ajaxSearch"

    # Timeouts (seconds)
    UPSTREAM_TIMEOUT_SECS: float = 15.0
    METADATA_TIMEOUT_SECS: float = 30.0

    # Stream relay
    RELAY_BUFFER_BYTES: int = 1 << 25  # 32 MB
    RELAY_CHUNK_BYTES: int = 1 << 16

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # API Keys
        self.RAPIDAPI_KEY = os.getenv("RAPIDAPI_KEY") or None
        self.RAPIDAPI_HOST = os.getenv("RAPIDAPI_HOST", self.RAPIDAPI_HOST)

        self.COBALT_API_URL = os.getenv("COBALT_API_URL", self.COBALT_API_URL)
        self.SAVETIK_API_URL = os.getenv("SAVETIK_API_URL", self.SAVETIK_API_URL)

        self.UPSTREAM_TIMEOUT_SECS = _float_env("UPSTREAM_TIMEOUT_SECS", 15.0)
        self.METADATA_TIMEOUT_SECS = _float_env("METADATA_TIMEOUT_SECS", 30.0)

        self.RELAY_BUFFER_BYTES = _int_env("RELAY_BUFFER_BYTES", 1 << 25)
        self.RELAY_CHUNK_BYTES = _int_env("RELAY_CHUNK_BYTES", 1 << 16)

        origins = os.getenv("CORS_ORIGINS")
        if origins:
            self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]
        else:
            self.CORS_ORIGINS = list(Settings.CORS_ORIGINS)


settings = Settings()
