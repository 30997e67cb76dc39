"""Core error taxonomy for semantic-memory."""

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

__all__ = [
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
