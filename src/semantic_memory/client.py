"""SemanticMemoryClient, the caller-facing facade.

Wires the lifecycle manager, ingestion service and retrieval engine around a
single embedding model and a single long-lived vector store handle.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from semantic_memory.application.ingestion import IngestionService
from semantic_memory.application.lifecycle import LifecycleManager
from semantic_memory.application.retrieval import RetrievalEngine
from semantic_memory.core.exceptions import ConfigError
from semantic_memory.domain.entities import (
    DEFAULT_LIMIT,
    DEFAULT_THRESHOLD,
    EmbedItem,
    MemoryStats,
    RecallOptions,
    SearchResult,
    SemanticMemoryConfig,
)
from semantic_memory.domain.ports import EmbeddingModel, IdGenerator, VectorStore

if TYPE_CHECKING:
    from semantic_memory.config.settings import Settings


def validate_config(config: SemanticMemoryConfig) -> None:
    """Raise ``ConfigError`` for a missing credential or a bad dimension."""
    if not config.api_key or not config.api_key.strip():
        raise ConfigError(
            "An embedding provider API key is required",
            details={"field": "api_key"},
        )
    if config.embedding_dimensions <= 0:
        raise ConfigError(
            f"embedding_dimensions must be positive, got {config.embedding_dimensions}",
            details={"field": "embedding_dimensions"},
        )


class SemanticMemoryClient:
    """Semantic storage and retrieval over free-text items.

    Adapters default to the OpenAI embedding model and the hnswlib store;
    either can be replaced through the keyword arguments.
    """

    def __init__(
        self,
        config: SemanticMemoryConfig,
        *,
        embedding_model: EmbeddingModel | None = None,
        vector_store: VectorStore | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        validate_config(config)
        self._config = config

        if embedding_model is None:
            from semantic_memory.infrastructure.embedding.openai_model import (
                OpenAIEmbeddingModel,
            )

            embedding_model = OpenAIEmbeddingModel(
                api_key=config.api_key,
                model=config.embedding_model,
                dimensions=config.embedding_dimensions,
            )
        elif embedding_model.dimensions != config.embedding_dimensions:
            raise ConfigError(
                f"Embedding model {embedding_model.model_name} produces "
                f"{embedding_model.dimensions} dimensions, configuration expects "
                f"{config.embedding_dimensions}",
                details={"field": "embedding_dimensions"},
            )

        if vector_store is None:
            from semantic_memory.infrastructure.vector.hnswlib_store import (
                HNSWLibVectorStore,
            )

            vector_store = HNSWLibVectorStore(
                storage_path=config.storage_path,
                dimensions=config.embedding_dimensions,
            )

        self._embedding_model = embedding_model
        self._vector_store = vector_store
        self._lifecycle = LifecycleManager(config.storage_path, vector_store)
        self._ingestion = IngestionService(
            self._lifecycle,
            embedding_model,
            vector_store,
            id_generator=id_generator,
        )
        self._retrieval = RetrievalEngine(self._lifecycle, embedding_model, vector_store)

    @property
    def config(self) -> SemanticMemoryConfig:
        return self._config

    @property
    def is_ready(self) -> bool:
        return self._lifecycle.is_ready

    async def initialize(self) -> None:
        """Prepare storage eagerly. Every operation does this on demand."""
        await self._lifecycle.ensure_ready()

    # --- Write path ---

    async def embed_one(self, item: EmbedItem) -> None:
        await self._ingestion.embed_one(item)

    async def embed_batch(self, items: Sequence[EmbedItem]) -> None:
        await self._ingestion.embed_batch(items)

    # --- Read path ---

    async def search(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> list[SearchResult]:
        return await self._retrieval.search(query, limit=limit, threshold=threshold)

    async def recall(
        self,
        category: str,
        query: str,
        options: RecallOptions | Mapping[str, Any] | None = None,
    ) -> list[SearchResult]:
        if isinstance(options, Mapping):
            options = RecallOptions(**options)
        return await self._retrieval.recall(category, query, options)

    async def get_stats(self) -> MemoryStats:
        return await self._retrieval.get_stats()

    # --- Resources ---

    async def close(self) -> None:
        """Release the embedding provider's network resources."""
        close = getattr(self._embedding_model, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> SemanticMemoryClient:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def create_client(settings: Settings | None = None) -> SemanticMemoryClient:
    """Build a client from process settings (environment / ``.env``)."""
    if settings is None:
        from semantic_memory.config.settings import get_settings

        settings = get_settings()
    return SemanticMemoryClient(settings.to_config())
