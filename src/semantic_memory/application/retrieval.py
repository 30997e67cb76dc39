"""Retrieval engine: search, recall, context expansion and stats.

Read path: caller -> EmbeddingModel -> VectorStore.query -> post-processing.

Relevance policy lives here rather than in the store. The store is asked for
the ``limit`` nearest candidates and the engine applies the ``>= threshold``
cut afterwards, so the store port stays vector-in, ranked-list-out.

Scores are whatever the store reports (higher is more similar). The bundled
hnswlib store reports cosine similarity in [-1, 1].
"""

from __future__ import annotations

import asyncio
import warnings
from collections import Counter
from typing import Any

import structlog

from semantic_memory.application.lifecycle import LifecycleManager
from semantic_memory.core.exceptions import DataIntegrityWarning, ValidationError
from semantic_memory.domain.entities import (
    DEFAULT_LIMIT,
    DEFAULT_THRESHOLD,
    MemoryStats,
    RecallOptions,
    SearchResult,
)
from semantic_memory.domain.enums import UNKNOWN_CATEGORY, ItemType
from semantic_memory.domain.ports import EmbeddingModel, VectorStore
from semantic_memory.domain.rules import (
    TimeBand,
    context_query,
    matches_category,
    parse_timestamp,
)

logger = structlog.get_logger(__name__)

# Recall over-fetch factor, leaves headroom for category filtering.
RECALL_OVERFETCH = 2

# Context expansion favours recall; the time band and platform filter
# restore precision.
CONTEXT_SEARCH_LIMIT = 20
CONTEXT_SEARCH_THRESHOLD = 0.5

# Stats sweep cap. The store has no count primitive, so get_stats is an
# approximation bounded by this value.
STATS_SCAN_LIMIT = 10_000


class RetrievalEngine:
    """Turns natural-language queries into ranked, filtered results."""

    def __init__(
        self,
        lifecycle: LifecycleManager,
        embedding_model: EmbeddingModel,
        vector_store: VectorStore,
    ) -> None:
        self._lifecycle = lifecycle
        self._embedding_model = embedding_model
        self._vector_store = vector_store

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> list[SearchResult]:
        """Return up to ``limit`` stored items scoring ``>= threshold``.

        The store is asked for exactly ``limit`` candidates; thresholding may
        leave fewer, including none. Store order is preserved.
        """
        await self._lifecycle.ensure_ready()

        if limit < 1:
            raise ValidationError(
                f"limit must be at least 1, got {limit}",
                details={"limit": limit},
            )

        vector = await self._embedding_model.embed_one(query)
        candidates = await self._vector_store.query(vector, top_k=limit)

        results = [
            _to_result(metadata, score)
            for metadata, score in candidates
            if score >= threshold
        ]

        logger.debug(
            "retrieval.search",
            candidates=len(candidates),
            results=len(results),
            limit=limit,
            threshold=threshold,
        )
        return results

    # ------------------------------------------------------------------
    # Recall
    # ------------------------------------------------------------------

    async def recall(
        self,
        category: str,
        query: str,
        options: RecallOptions | None = None,
    ) -> list[SearchResult]:
        """Category-scoped search with optional temporal context for chats.

        ``category`` matches either the stored ``type`` or ``platform``;
        ``"all"`` disables scoping.
        """
        await self._lifecycle.ensure_ready()
        options = options or RecallOptions()

        results = await self.search(
            query,
            limit=options.limit * RECALL_OVERFETCH,
            threshold=options.threshold,
        )
        scoped = [r for r in results if matches_category(r.metadata, category)]
        scoped = scoped[: options.limit]

        if options.context_window > 0:
            scoped = list(
                await asyncio.gather(
                    *(self._with_context(r, options.context_window) for r in scoped)
                )
            )

        logger.debug(
            "retrieval.recall",
            category=category,
            fetched=len(results),
            returned=len(scoped),
        )
        return scoped

    async def _with_context(self, result: SearchResult, window_minutes: int) -> SearchResult:
        metadata = result.metadata
        if metadata.get("type") != ItemType.CHAT.value or not metadata.get("timestamp"):
            return result

        if "platform" not in metadata:
            warnings.warn(
                "chat entry has a timestamp but no platform; context limited to "
                "entries without a platform",
                DataIntegrityWarning,
                stacklevel=2,
            )

        context = await self.get_contextual_messages(
            metadata["timestamp"],
            metadata.get("platform"),
            window_minutes,
        )
        if context is None:
            return result
        return result.model_copy(update={"context": context})

    async def get_contextual_messages(
        self,
        timestamp: Any,
        platform: str | None,
        window_minutes: float,
    ) -> list[SearchResult] | None:
        """Messages from ``platform`` within ``±window_minutes`` of ``timestamp``.

        Best-effort: a relaxed semantic search over a synthesized query,
        post-filtered to the closed time band and the exact platform.
        Returns ``None`` when the anchor timestamp cannot be parsed.
        """
        await self._lifecycle.ensure_ready()

        anchor = parse_timestamp(timestamp)
        if anchor is None:
            warnings.warn(
                f"unparseable timestamp {timestamp!r}; context expansion skipped",
                DataIntegrityWarning,
                stacklevel=2,
            )
            logger.warning("retrieval.context.bad_timestamp", timestamp=str(timestamp))
            return None

        band = TimeBand.around(anchor, window_minutes)
        candidates = await self.search(
            context_query(platform, timestamp),
            limit=CONTEXT_SEARCH_LIMIT,
            threshold=CONTEXT_SEARCH_THRESHOLD,
        )

        context: list[SearchResult] = []
        for candidate in candidates:
            if candidate.metadata.get("platform") != platform:
                continue
            moment = parse_timestamp(candidate.metadata.get("timestamp"))
            if moment is None or not band.contains(moment):
                continue
            context.append(candidate)
        return context

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    async def get_stats(self) -> MemoryStats:
        """Count stored entries by ``type``.

        Implemented as an unfiltered sweep capped at ``STATS_SCAN_LIMIT``
        entries; entries scoring below zero against the empty query are not
        counted.
        """
        await self._lifecycle.ensure_ready()

        results = await self.search("", limit=STATS_SCAN_LIMIT, threshold=0.0)
        categories = Counter(
            str(r.metadata.get("type") or UNKNOWN_CATEGORY) for r in results
        )
        return MemoryStats(total=len(results), categories=dict(categories))


def _to_result(metadata: dict[str, Any], score: float) -> SearchResult:
    content = metadata.get("content")
    if content is None:
        warnings.warn(
            "stored entry has no content metadata",
            DataIntegrityWarning,
            stacklevel=3,
        )
        content = ""
    return SearchResult(content=str(content), metadata=dict(metadata), similarity=score)
