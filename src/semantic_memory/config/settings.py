"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from semantic_memory.domain.entities import (
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_LIMIT,
    DEFAULT_THRESHOLD,
    SemanticMemoryConfig,
)


class Settings(BaseSettings):
    """Process-level settings loaded from environment variables and ``.env``.

    This is the only place the environment is consulted; the core receives an
    explicit ``SemanticMemoryConfig`` built by ``to_config()``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEMANTIC_MEMORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # General
    log_level: str = "INFO"
    log_json: bool = False

    # Storage
    storage_path: Path = Path.home() / ".semantic-memory"

    # OpenAI
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SEMANTIC_MEMORY_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS

    # Retrieval defaults for the CLI and MCP surfaces
    default_limit: int = DEFAULT_LIMIT
    default_threshold: float = DEFAULT_THRESHOLD
    default_context_window: int = DEFAULT_CONTEXT_WINDOW

    def to_config(self) -> SemanticMemoryConfig:
        return SemanticMemoryConfig(
            storage_path=self.storage_path.expanduser(),
            api_key=self.openai_api_key,
            embedding_model=self.embedding_model,
            embedding_dimensions=self.embedding_dimensions,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
