"""Domain entities for semantic-memory.

All entities are Pydantic BaseModels. ``EmbedItem`` is the ingestion input,
``StoredEntry`` the persisted record and ``SearchResult`` the retrieval output.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from semantic_memory.domain.enums import ItemType

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBEDDING_DIMENSIONS = 1536

DEFAULT_LIMIT = 10
DEFAULT_THRESHOLD = 0.7
DEFAULT_CONTEXT_WINDOW = 3  # minutes

# Metadata keys with a dedicated ItemMetadata field.
KNOWN_METADATA_KEYS = frozenset({"platform", "username", "timestamp"})


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class ItemMetadata(BaseModel):
    """Caller metadata attached to an item.

    ``platform``, ``username`` and ``timestamp`` are the well-known keys the
    retrieval engine understands; anything else goes into ``extra``.
    """

    platform: str | int | float | bool | None = None
    username: str | int | float | bool | None = None
    timestamp: str | int | float | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalise_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> ItemMetadata:
        """Split an open string-keyed mapping into known fields and ``extra``."""
        if not mapping:
            return cls()
        known = {k: v for k, v in mapping.items() if k in KNOWN_METADATA_KEYS}
        extra = {k: v for k, v in mapping.items() if k not in KNOWN_METADATA_KEYS}
        return cls(**known, extra=extra)

    def to_payload(self) -> dict[str, Any]:
        """Flatten into a single mapping, omitting unset well-known fields."""
        payload = dict(self.extra)
        for key in sorted(KNOWN_METADATA_KEYS):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


class RecallOptions(BaseModel):
    """Tuning knobs for ``recall``."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=DEFAULT_LIMIT, ge=1)
    threshold: float = DEFAULT_THRESHOLD
    context_window: int = Field(default=DEFAULT_CONTEXT_WINDOW, ge=0)


class MemoryStats(BaseModel):
    """Approximate corpus counts by category."""

    total: int = 0
    categories: dict[str, int] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Core entities
# ---------------------------------------------------------------------------


class EmbedItem(BaseModel):
    """A piece of text submitted for embedding."""

    type: ItemType
    content: str = Field(..., min_length=1)
    metadata: ItemMetadata = Field(default_factory=ItemMetadata)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _coerce_metadata(cls, value: Any) -> Any:
        if value is None:
            return ItemMetadata()
        if isinstance(value, Mapping):
            return ItemMetadata.from_mapping(value)
        return value


class StoredEntry(BaseModel):
    """A vector plus its metadata payload, as written to the vector store."""

    model_config = ConfigDict(frozen=True)

    id: str
    vector: list[float]
    metadata: dict[str, Any]


class SearchResult(BaseModel):
    """A stored item returned by search or recall."""

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity: float
    context: list[SearchResult] | None = None


class SemanticMemoryConfig(BaseModel):
    """Explicit configuration for a ``SemanticMemoryClient``.

    No environment lookup happens here; ``Settings`` resolves the environment
    at the process boundary and builds this object.
    """

    model_config = ConfigDict(frozen=True)

    storage_path: Path
    api_key: str | None = None
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
