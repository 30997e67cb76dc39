"""OpenAI-backed EmbeddingModel implementation.

Wraps ``openai.AsyncOpenAI`` embeddings. Implements the ``EmbeddingModel``
port.
"""

from __future__ import annotations

import openai
import structlog
from openai import AsyncOpenAI

from semantic_memory.core.exceptions import ProviderError

logger = structlog.get_logger(__name__)


class OpenAIEmbeddingModel:
    """Embedding model served by the OpenAI embeddings endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._dimensions = dimensions
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed_one(self, text: str) -> list[float]:
        vectors = await self._create([text])
        return vectors[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await self._create(texts)

    async def close(self) -> None:
        await self._client.close()

    async def _create(self, texts: list[str]) -> list[list[float]]:
        # The endpoint rejects empty strings.
        inputs = [text if text else " " for text in texts]
        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=inputs,
                dimensions=self._dimensions,
            )
        except openai.OpenAIError as e:
            logger.error(
                "embedding.request_failed",
                model=self._model,
                inputs=len(inputs),
                error=str(e),
            )
            raise ProviderError(
                f"Embedding request to {self._model} failed: {e}",
                details={"model": self._model, "inputs": len(inputs)},
            ) from e

        # Each response item carries the ``index`` of its input.
        vectors: list[list[float] | None] = [None] * len(inputs)
        for item in response.data:
            if 0 <= item.index < len(vectors):
                vectors[item.index] = list(item.embedding)

        if any(v is None for v in vectors):
            raise ProviderError(
                f"Embedding response from {self._model} is missing vectors",
                details={"expected": len(inputs), "received": len(response.data)},
            )
        return vectors  # type: ignore[return-value]
