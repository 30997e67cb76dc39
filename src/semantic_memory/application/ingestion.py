"""Ingestion: turn EmbedItems into stored vector entries.

Write path: caller -> EmbeddingModel -> VectorStore.insert.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

import structlog

from semantic_memory.application.lifecycle import LifecycleManager
from semantic_memory.core.exceptions import ProviderError, StoreWriteError
from semantic_memory.domain.entities import EmbedItem, StoredEntry
from semantic_memory.domain.ids import UuidIdGenerator
from semantic_memory.domain.ports import EmbeddingModel, IdGenerator, VectorStore
from semantic_memory.domain.rules import entry_id

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_entry_metadata(item: EmbedItem, embedded_at: datetime) -> dict[str, Any]:
    """Caller metadata plus the system-stamped ``type``, ``content`` and ``embedded_at``.

    System keys win on collision so ``content`` and ``type`` always hold the
    real values.
    """
    return {
        **item.metadata.to_payload(),
        "type": item.type.value,
        "content": item.content,
        "embedded_at": embedded_at.isoformat(),
    }


class IngestionService:
    """Embeds items and writes them to the vector store."""

    def __init__(
        self,
        lifecycle: LifecycleManager,
        embedding_model: EmbeddingModel,
        vector_store: VectorStore,
        id_generator: IdGenerator | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lifecycle = lifecycle
        self._embedding_model = embedding_model
        self._vector_store = vector_store
        self._id_generator = id_generator or UuidIdGenerator()
        self._clock = clock

    async def embed_one(self, item: EmbedItem) -> None:
        """Embed a single item and store it. One durable write."""
        await self._lifecycle.ensure_ready()

        vector = await self._embedding_model.embed_one(item.content)
        entry = StoredEntry(
            id=entry_id(item.type, self._id_generator.next_suffix()),
            vector=vector,
            metadata=build_entry_metadata(item, self._clock()),
        )
        await self._vector_store.insert(entry.id, entry.vector, entry.metadata)

        logger.debug("ingestion.item.stored", entry_id=entry.id, type=item.type.value)

    async def embed_batch(self, items: Sequence[EmbedItem]) -> None:
        """Embed many items with one provider call and store them concurrently.

        Succeeds only once every item is stored. If any insert fails, a single
        ``StoreWriteError`` is raised after all writes have settled; inserts
        that succeeded remain durable.
        """
        await self._lifecycle.ensure_ready()

        if not items:
            return

        log = logger.bind(batch_size=len(items))
        vectors = await self._embedding_model.embed_many([item.content for item in items])
        if len(vectors) != len(items):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(items)} inputs",
                details={"expected": len(items), "received": len(vectors)},
            )

        embedded_at = self._clock()
        entries = [
            StoredEntry(
                id=entry_id(item.type, self._id_generator.next_suffix(), index=index),
                vector=vector,
                metadata=build_entry_metadata(item, embedded_at),
            )
            for index, (item, vector) in enumerate(zip(items, vectors, strict=True))
        ]

        outcomes = await asyncio.gather(
            *(
                self._vector_store.insert(entry.id, entry.vector, entry.metadata)
                for entry in entries
            ),
            return_exceptions=True,
        )

        failures = [
            (entry, outcome)
            for entry, outcome in zip(entries, outcomes, strict=True)
            if isinstance(outcome, BaseException)
        ]
        if failures:
            failed_ids = [entry.id for entry, _ in failures]
            log.error(
                "ingestion.batch.failed",
                failed=len(failures),
                stored=len(entries) - len(failures),
            )
            raise StoreWriteError(
                f"{len(failures)} of {len(entries)} batch inserts failed",
                details={"failed_ids": failed_ids},
            ) from failures[0][1]

        log.info("ingestion.batch.stored")
