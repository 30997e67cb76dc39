"""HNSWLib-based VectorStore implementation.

Entries are persisted as JSON Lines under the storage directory::

    <storage_path>/
    └── entries.jsonl     one {"id", "vector", "metadata"} record per line

``initialize()`` rebuilds an in-memory hnswlib HNSW index (cosine space) from
the file; ``insert()`` appends a record and adds it to the live index.
Implements the ``VectorStore`` port.

Scores are cosine similarities (``1 - cosine distance``), in [-1, 1].
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

import numpy as np
import structlog

from semantic_memory.core.exceptions import (
    StorageInitError,
    StoreQueryError,
    StoreWriteError,
)

logger = structlog.get_logger(__name__)

ENTRIES_FILE = "entries.jsonl"


class HNSWLibVectorStore:
    """Durable vector store backed by an hnswlib index and a JSONL log."""

    def __init__(
        self,
        storage_path: str | Path,
        dimensions: int,
        ef_construction: int = 200,
        m: int = 16,
        ef_search: int = 50,
    ) -> None:
        self._root = Path(storage_path)
        self._dimensions = dimensions
        self._ef_construction = ef_construction
        self._m = m
        self._ef_search = ef_search

        self._index = None  # hnswlib.Index, created on initialize()
        self._ids: list[str] = []  # label -> entry id
        self._metadata: list[dict[str, Any]] = []  # label -> metadata
        self._labels: dict[str, int] = {}  # entry id -> label
        self._initialized = False
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # VectorStore port interface
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the storage directory and load existing entries."""
        if self._initialized:
            return

        log = logger.bind(storage_path=str(self._root))
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            records = self._read_records()
        except (OSError, ValueError, KeyError) as e:
            log.error("vector_store.load_failed", error=str(e))
            raise StorageInitError(
                f"Cannot open vector store at {self._root}: {e}",
                details={"storage_path": str(self._root)},
            ) from e

        self._build_index(records)
        self._initialized = True
        log.info("vector_store.loaded", entries=len(records), dimensions=self._dimensions)

    async def insert(
        self,
        id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None:
        """Append an entry. Fails on id collision or dimension mismatch.

        Writes are serialised by the store lock; the durable append runs in a
        worker thread so the event loop is not blocked on ``fsync``.
        """
        if not self._initialized:
            raise StoreWriteError("Vector store is not initialized", details={"id": id})
        if len(vector) != self._dimensions:
            raise StoreWriteError(
                f"Vector has {len(vector)} dimensions, store expects {self._dimensions}",
                details={"id": id},
            )

        async with self._lock:
            if id in self._labels:
                raise StoreWriteError(f"Entry id already exists: {id}", details={"id": id})

            record = {
                "id": id,
                "vector": [float(v) for v in vector],
                "metadata": metadata,
            }
            line = json.dumps(record, default=str)
            try:
                await asyncio.to_thread(self._append_line, line)
            except OSError as e:
                raise StoreWriteError(
                    f"Cannot write entry {id}: {e}", details={"id": id}
                ) from e

            # Re-read the metadata through JSON so it matches what a reload returns
            self._add_to_index(id, record["vector"], json.loads(line)["metadata"])

    async def query(
        self,
        vector: list[float],
        top_k: int,
    ) -> list[tuple[dict[str, Any], float]]:
        """Find the ``top_k`` nearest entries.

        Returns ``(metadata, cosine_similarity)`` pairs sorted by score
        descending. hnswlib reports cosine *distance*, converted here.
        """
        if not self._initialized:
            raise StoreQueryError("Vector store is not initialized")
        if len(vector) != self._dimensions:
            raise StoreQueryError(
                f"Query vector has {len(vector)} dimensions, store expects {self._dimensions}"
            )
        if top_k < 1 or not self._ids:
            return []

        k = min(top_k, len(self._ids))
        query = np.array([vector], dtype=np.float32)
        try:
            # ef must be >= k for hnswlib to return k neighbours
            self._index.set_ef(max(self._ef_search, k))
            labels, distances = self._index.knn_query(query, k=k)
        except RuntimeError as e:
            raise StoreQueryError(f"Vector query failed: {e}", details={"top_k": top_k}) from e

        results = [
            (dict(self._metadata[int(label)]), 1.0 - float(dist))
            for label, dist in zip(labels[0], distances[0])
        ]
        results.sort(key=lambda r: r[1], reverse=True)
        return results

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def entries_path(self) -> Path:
        return self._root / ENTRIES_FILE

    @property
    def size(self) -> int:
        """Number of stored entries."""
        return len(self._ids)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _append_line(self, line: str) -> None:
        with self.entries_path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()
            os.fsync(f.fileno())

    def _read_records(self) -> list[dict[str, Any]]:
        path = self.entries_path
        if not path.exists():
            return []
        records: list[dict[str, Any]] = []
        for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            data = json.loads(line)
            record = {
                "id": data["id"],
                "vector": data["vector"],
                "metadata": data["metadata"],
            }
            if len(record["vector"]) != self._dimensions:
                raise ValueError(
                    f"{path}:{lineno}: vector has {len(record['vector'])} dimensions, "
                    f"expected {self._dimensions}"
                )
            records.append(record)
        return records

    def _build_index(self, records: list[dict[str, Any]]) -> None:
        import hnswlib

        index = hnswlib.Index(space="cosine", dim=self._dimensions)
        index.init_index(
            max_elements=max(len(records), 16),
            ef_construction=self._ef_construction,
            M=self._m,
        )
        index.set_ef(self._ef_search)

        self._index = index
        self._ids = []
        self._metadata = []
        self._labels = {}

        if records:
            vectors = np.array([r["vector"] for r in records], dtype=np.float32)
            index.add_items(vectors, np.arange(len(records), dtype=np.int64))
            for label, record in enumerate(records):
                self._ids.append(record["id"])
                self._metadata.append(record["metadata"])
                self._labels[record["id"]] = label

    def _add_to_index(self, id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        label = len(self._ids)
        if label >= self._index.get_max_elements():
            self._index.resize_index(max(16, label * 2))
        self._index.add_items(
            np.array([vector], dtype=np.float32),
            np.array([label], dtype=np.int64),
        )
        self._ids.append(id)
        self._metadata.append(metadata)
        self._labels[id] = label
