"""Domain models, ports and rules for semantic-memory."""

from semantic_memory.domain.entities import (
    EmbedItem,
    ItemMetadata,
    MemoryStats,
    RecallOptions,
    SearchResult,
    SemanticMemoryConfig,
    StoredEntry,
)
from semantic_memory.domain.enums import ALL_CATEGORIES, ItemType
from semantic_memory.domain.ports import EmbeddingModel, IdGenerator, VectorStore

__all__ = [
    # Models
    "EmbedItem",
    "ItemMetadata",
    "MemoryStats",
    "RecallOptions",
    "SearchResult",
    "SemanticMemoryConfig",
    "StoredEntry",
    "ItemType",
    "ALL_CATEGORIES",
    # Ports
    "EmbeddingModel",
    "IdGenerator",
    "VectorStore",
]
