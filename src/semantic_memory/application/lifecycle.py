"""One-time setup of the storage location and the vector store.

Every public operation calls ``ensure_ready()`` first, so callers never
observe an uninitialised store.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from semantic_memory.core.exceptions import StorageInitError
from semantic_memory.domain.ports import VectorStore

logger = structlog.get_logger(__name__)


class LifecycleManager:
    """Idempotent initialiser guarding all operations."""

    def __init__(self, storage_path: str | Path, vector_store: VectorStore) -> None:
        self._storage_path = Path(storage_path)
        self._vector_store = vector_store
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def ensure_ready(self) -> None:
        """Create the storage directory and initialise the store, once.

        Raises ``StorageInitError`` when the directory cannot be created.
        Store initialisation errors propagate unchanged.
        """
        if self._ready:
            return

        async with self._lock:
            if self._ready:
                return

            log = logger.bind(storage_path=str(self._storage_path))
            try:
                self._storage_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                log.error("lifecycle.storage.create_failed", error=str(e))
                raise StorageInitError(
                    f"Cannot create storage directory {self._storage_path}: {e}",
                    details={"storage_path": str(self._storage_path)},
                ) from e

            await self._vector_store.initialize()
            self._ready = True
            log.info("semantic_memory.initialized")
