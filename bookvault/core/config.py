"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    database_url: str = "sqlite+aiosqlite:///./data/bookvault.db"
    embedding_provider: Literal["mock", "ollama", "openai"] = "mock"
    embedding_base_url: str = "http://localhost:11434"  # Ollama endpoint
    embedding_model: str = ""  # empty: the provider's DEFAULT_MODEL
    embedding_api_key: str = ""
    embedding_dimension: int = 384  # mock provider only
    embedding_timeout: float = 30.0
    metadata_source: Literal["openlibrary", "googlebooks"] = "openlibrary"
    metadata_timeout: float = 15.0
    google_books_api_key: str = ""
    default_search_limit: int = 10
    log_level: str = "INFO"

    model_config = {"env_file": ".env"}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
