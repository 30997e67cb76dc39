"""Embedding model adapters."""

from semantic_memory.infrastructure.embedding.openai_model import OpenAIEmbeddingModel

__all__ = ["OpenAIEmbeddingModel"]
