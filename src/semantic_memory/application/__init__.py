"""Application services: lifecycle, ingestion and retrieval."""

from semantic_memory.application.ingestion import IngestionService
from semantic_memory.application.lifecycle import LifecycleManager
from semantic_memory.application.retrieval import RetrievalEngine

__all__ = ["IngestionService", "LifecycleManager", "RetrievalEngine"]
