"""Port definitions (hexagonal architecture).

Each Protocol defines a boundary that infrastructure adapters must satisfy.
The application layer depends only on these Protocols, never on concrete
implementations.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Embedding port
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingModel(Protocol):
    """Generates embedding vectors from text.

    The model id is bound when the adapter is constructed, so every vector
    produced by one instance shares the same model and dimension.
    Failures raise ``ProviderError``.
    """

    @property
    def model_name(self) -> str: ...

    @property
    def dimensions(self) -> int: ...

    async def embed_one(self, text: str) -> list[float]: ...

    async def embed_many(self, texts: list[str]) -> list[list[float]]: ...


# ---------------------------------------------------------------------------
# Storage port
# ---------------------------------------------------------------------------


@runtime_checkable
class VectorStore(Protocol):
    """Durable vector store with a metadata payload per entry."""

    async def initialize(self) -> None: ...

    async def insert(
        self,
        id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None: ...

    async def query(
        self,
        vector: list[float],
        top_k: int,
    ) -> list[tuple[dict[str, Any], float]]: ...  # (metadata, score), score desc


# ---------------------------------------------------------------------------
# Identity port
# ---------------------------------------------------------------------------


@runtime_checkable
class IdGenerator(Protocol):
    """Produces unique suffixes for stored entry ids."""

    def next_suffix(self) -> str: ...
