"""Shared fixtures: in-memory fakes for the embedding and vector store ports."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

import pytest

from semantic_memory.application.lifecycle import LifecycleManager
from semantic_memory.config.logging import configure_logging
from semantic_memory.core.exceptions import StoreWriteError
from semantic_memory.domain.ids import CounterIdGenerator

DIMS = 4

# Keyword -> vector. Texts containing the same keyword embed identically.
KEYWORD_VECTORS: dict[str, list[float]] = {
    "hello": [1.0, 0.0, 0.0, 0.0],
    "greeting": [1.0, 0.0, 0.0, 0.0],
    "parse": [0.0, 1.0, 0.0, 0.0],
    "error": [0.0, 1.0, 0.0, 0.0],
    "messages from": [0.0, 0.0, 1.0, 0.0],
}
FALLBACK_VECTOR = [0.0, 0.0, 0.0, 1.0]


class FakeEmbeddingModel:
    """Deterministic keyword-driven embeddings with call recording."""

    def __init__(
        self,
        dimensions: int = DIMS,
        vectors: dict[str, list[float]] | None = None,
        fallback: list[float] | None = None,
    ) -> None:
        self._dimensions = dimensions
        self._vectors = vectors if vectors is not None else KEYWORD_VECTORS
        self._fallback = fallback if fallback is not None else FALLBACK_VECTOR
        self.one_calls: list[str] = []
        self.many_calls: list[list[str]] = []

    @property
    def model_name(self) -> str:
        return "fake-embedding"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def vector_for(self, text: str) -> list[float]:
        lowered = text.lower()
        for keyword, vector in self._vectors.items():
            if keyword in lowered:
                return list(vector)
        return list(self._fallback)

    async def embed_one(self, text: str) -> list[float]:
        self.one_calls.append(text)
        return self.vector_for(text)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.many_calls.append(list(texts))
        return [self.vector_for(t) for t in texts]

    @property
    def call_count(self) -> int:
        return len(self.one_calls) + len(self.many_calls)


def _cosine(a: list[float], b: list[float]) -> float:
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(x * x for x in b))
    if na == 0 or nb == 0:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / (na * nb)


class FakeVectorStore:
    """In-memory brute-force cosine store."""

    def __init__(self, fail_on: Callable[[str], bool] | None = None) -> None:
        self.entries: dict[str, tuple[list[float], dict[str, Any]]] = {}
        self.initialize_calls = 0
        self.query_calls: list[int] = []
        self._fail_on = fail_on

    async def initialize(self) -> None:
        self.initialize_calls += 1

    async def insert(self, id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        if self._fail_on is not None and self._fail_on(id):
            raise StoreWriteError(f"injected failure for {id}", details={"id": id})
        if id in self.entries:
            raise StoreWriteError(f"Entry id already exists: {id}", details={"id": id})
        self.entries[id] = (list(vector), dict(metadata))

    async def query(self, vector: list[float], top_k: int) -> list[tuple[dict[str, Any], float]]:
        self.query_calls.append(top_k)
        scored = [(dict(meta), _cosine(vector, vec)) for vec, meta in self.entries.values()]
        scored.sort(key=lambda r: r[1], reverse=True)
        return scored[:top_k]

    def seed(self, id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        self.entries[id] = (list(vector), dict(metadata))


@pytest.fixture
def embedding_model():
    return FakeEmbeddingModel()


@pytest.fixture
def vector_store():
    return FakeVectorStore()


@pytest.fixture
def lifecycle(tmp_path, vector_store):
    return LifecycleManager(tmp_path / "memory", vector_store)


@pytest.fixture
def id_generator():
    return CounterIdGenerator()


@pytest.fixture
def store_factory():
    """Build a FakeVectorStore with custom failure injection."""
    return FakeVectorStore


@pytest.fixture
def embedding_factory():
    """Build a FakeEmbeddingModel with custom vectors or dimensions."""
    return FakeEmbeddingModel


@pytest.fixture(autouse=True)
def _quiet_logging():
    """Keep info-level logs off stdout, where CLI output is parsed."""
    configure_logging("WARNING")
