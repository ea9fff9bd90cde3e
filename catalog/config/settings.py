"""
Configuration settings for the catalog backend
Loads from environment variables and .env file
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogSettings(BaseSettings):
    """
    Catalog configuration settings.

    Covers the database connection and the recommender the review
    moderation workflow keeps in sync.
    """

    # Database settings
    database_url: str = Field(default="sqlite:///./catalog.db", alias="DATABASE_URL")
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, alias="DB_MAX_OVERFLOW")
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    # Recommender settings
    recommender_backend: Literal["http", "redis", "memory"] = Field(
        default="memory", alias="RECOMMENDER_BACKEND"
    )
    recommender_url: str = Field(default="http://localhost:8080/api/v1", alias="RECOMMENDER_URL")
    recommender_timeout: float = Field(default=2.0, alias="RECOMMENDER_TIMEOUT")  # seconds
    recommender_api_key: Optional[str] = Field(default=None, alias="RECOMMENDER_API_KEY")

    # Redis settings (recommender_backend=redis)
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_key_prefix: str = Field(default="recommender:prefs", alias="REDIS_KEY_PREFIX")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("recommender_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Gateway calls must always be bounded."""
        if v <= 0:
            raise ValueError(f"recommender_timeout must be positive, got {v}")
        return v

    @field_validator("recommender_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
        validate_default=True,
        populate_by_name=True,  # Allow using both field name and alias
    )


# Global settings instance
_settings: Optional[CatalogSettings] = None


def get_settings() -> CatalogSettings:
    """Get global catalog settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = CatalogSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
