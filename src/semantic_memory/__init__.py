"""semantic-memory: semantic storage and recall over free-text items."""

from semantic_memory.client import SemanticMemoryClient, create_client
from semantic_memory.core.exceptions import (
    ConfigError,
    DataIntegrityWarning,
    ProviderError,
    SemanticMemoryError,
    StorageInitError,
    StoreError,
    StoreQueryError,
    StoreWriteError,
    ValidationError,
)
from semantic_memory.domain.entities import (
    EmbedItem,
    ItemMetadata,
    MemoryStats,
    RecallOptions,
    SearchResult,
    SemanticMemoryConfig,
)
from semantic_memory.domain.enums import ItemType

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Client
    "SemanticMemoryClient",
    "create_client",
    # Models
    "EmbedItem",
    "ItemMetadata",
    "ItemType",
    "MemoryStats",
    "RecallOptions",
    "SearchResult",
    "SemanticMemoryConfig",
    # Exceptions
    "SemanticMemoryError",
    "ConfigError",
    "StorageInitError",
    "ProviderError",
    "StoreError",
    "StoreWriteError",
    "StoreQueryError",
    "ValidationError",
    "DataIntegrityWarning",
]
