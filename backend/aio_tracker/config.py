"""
Configuration management for the AIO citation tracker
Environment-based settings with local-development defaults
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "aio-citation-tracker"
    APP_ENV: str = "development"  # development, staging, production
    DEBUG: bool = False
    API_VERSION: str = "v1"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # Database (SQLite for local development, PostgreSQL in production)
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/aio-analysis.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # DataForSEO (Google SERP + AI Overview provider)
    DATAFORSEO_API_URL: str = "https://api.dataforseo.com/v3/serp/google/organic/live/advanced"
    DATAFORSEO_API_KEY: Optional[str] = None  # "Basic <base64 login:password>"
    DATAFORSEO_TIMEOUT: float = 120.0  # seconds, async AI Overviews are slow
    DATAFORSEO_DEPTH: int = 10
    FETCH_BATCH_SIZE: int = 50  # Max concurrent provider requests

    # Analytics
    SPARKLINE_WINDOW: int = 5  # Sessions shown in rank sparklines
    TRENDS_DEFAULT_LIMIT: int = 10
    TOP_CHANGES_LIMIT: int = 10
    TOP_RANK_THRESHOLD: int = 3

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings loader"""
    return Settings()


# Priority used when only the most important session changes are shown
CHANGE_PRIORITY = {
    "rank_improved": 1,
    "rank_declined": 2,
    "aio_gained": 3,
    "aio_lost": 4,
    "new": 5,
    "removed": 6,
}
