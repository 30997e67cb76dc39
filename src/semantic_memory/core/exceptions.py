"""Custom exceptions for semantic-memory."""


class SemanticMemoryError(Exception):
    """Base exception for all semantic-memory errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(SemanticMemoryError):
    """Raised when the configuration is missing a credential or is inconsistent."""

    pass


class StorageInitError(SemanticMemoryError):
    """Raised when the persistent storage cannot be created or opened."""

    pass


class ProviderError(SemanticMemoryError):
    """Raised when the embedding provider call fails."""

    pass


class StoreError(SemanticMemoryError):
    """Raised when a vector store operation fails."""

    pass


class StoreWriteError(StoreError):
    """Raised when an insert into the vector store fails."""

    pass


class StoreQueryError(StoreError):
    """Raised when a vector store query fails."""

    pass


class ValidationError(SemanticMemoryError):
    """Raised when caller-supplied arguments are invalid."""

    pass


class DataIntegrityWarning(UserWarning):
    """A stored entry is missing metadata the engine expects.

    Non-fatal: the engine substitutes empty or ``"unknown"`` values.
    """
