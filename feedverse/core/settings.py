from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_EXCLUDED_PODROLL_URLS = [
    "https://www.doerfelverse.com/feeds/intothedoerfelverse.xml",
]


class Settings(BaseSettings):
    # Application
    app_name: str = "Feedverse"
    debug: bool = False
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")

    # Feed store - "json" keeps the whole registry in one file, "sql" uses database_url
    feed_store: Literal["json", "sql"] = "json"
    feeds_path: Path = Path("data/feeds.json")
    database_url: str = "sqlite:///./data/feedverse.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # HTTP client
    http_timeout_seconds: int = 30
    http_max_retries: int = 3
    http_user_agent: str = "Feedverse/1.0 (+podroll discovery)"

    # Podroll discovery
    discovery_max_depth: int = 2
    discovery_default_priority: Literal["core", "extended", "low"] = "extended"
    podroll_excluded_urls: list[str] = DEFAULT_EXCLUDED_PODROLL_URLS

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @field_validator("discovery_max_depth")
    @classmethod
    def validate_discovery_max_depth(cls, v):
        if v < 0:
            raise ValueError("DISCOVERY_MAX_DEPTH must be >= 0")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
