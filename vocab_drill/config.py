"""Application configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = "Vocabulary Drill"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = Field(
        "sqlite:///./vocab_drill.db",
        description="SQLAlchemy database URL",
    )
    DATABASE_ECHO: bool = False

    REDIS_URL: Optional[AnyUrl] = Field(
        None, description="Optional Redis connection string for the deck cache"
    )

    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    LOG_LEVEL: str = Field("INFO", description="Minimum loguru level")
    LOG_FILE: Optional[str] = Field(None, description="Optional rotating log file path")

    # Drill engine tuning
    DRILL_MATCH_PAGE_SIZE: int = Field(5, ge=1, description="Pairs shown per matching page")
    DRILL_MISMATCH_COOLDOWN_MS: int = Field(800, ge=0)
    DRILL_PAGE_ADVANCE_MS: int = Field(600, ge=0)
    DRILL_DIALOGUE_ADVANCE_MS: int = Field(800, ge=0)
    DRILL_PRACTICE_ADVANCE_MS: int = Field(1000, ge=0)
    DRILL_SESSION_TTL_SECONDS: int = Field(
        3600, ge=1, description="Idle drill sessions are discarded after this many seconds"
    )

    DECK_CACHE_TTL_SECONDS: int = Field(600, ge=0)
    DECK_CACHE_MAX_ENTRIES: int = Field(256, ge=1)

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


settings = get_settings()
