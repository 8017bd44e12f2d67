from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App configuration (env-friendly).

    Tip: create a .env file and override settings there, e.g. OVERPASS_BASE_URL
    to point at a self-hosted Overpass instance.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Care Locator API"
    version: str = "0.1.0"

    overpass_base_url: AnyHttpUrl = "https://overpass-api.de/api/interpreter"

    # Overpass operators ask clients to identify themselves.
    user_agent: str = "care-locator/0.1.0"

    # Matches the [timeout:25] hint sent inside the query itself.
    http_timeout_s: float = 25.0

    # ~5 km search radius: 10 minutes at an average urban speed of 30 km/h
    default_speed_kmh: float = 30.0
    default_max_minutes: float = 10.0
    min_radius_m: int = 500
    result_limit: int = 50

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
