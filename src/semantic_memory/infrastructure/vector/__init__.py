"""Vector store adapters."""

from semantic_memory.infrastructure.vector.hnswlib_store import HNSWLibVectorStore

__all__ = ["HNSWLibVectorStore"]
