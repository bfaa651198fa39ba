"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Carrier secrets are never settings fields: the credential manager reads them
      from the environment by the names the carrier config files declare
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box locally
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    service_name: str = "carrier-gateway"

    # Carriers
    carrier_config_dir: str = "config/carriers"
    default_request_timeout_ms: int = 30_000
    token_refresh_buffer_seconds: int = 300

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
