"""OpenAI embedding provider — text-embedding-3-small/large.

Reads ``OPENAI_API_KEY`` from the environment unless a key is passed in.
Query and document embeddings must come from the same model as the index.
"""

from __future__ import annotations

import logging
from typing import Any

from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.errors import EmbeddingFailed

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-large"

_DIMENSION_MAP = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

MAX_INPUTS_PER_REQUEST = 2048


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text via the OpenAI Embeddings API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        dimension: int | None = None,
        client: Any | None = None,
    ):
        self.model = model
        self._dimension = dimension or _DIMENSION_MAP.get(model, 1536)

        if client is None:
            import openai

            client = openai.OpenAI(api_key=api_key)
        self._client: Any = client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for i in range(0, len(texts), MAX_INPUTS_PER_REQUEST):
            batch = texts[i : i + MAX_INPUTS_PER_REQUEST]
            data = self._create(batch)
            # The API does not promise response order; the index field does
            vectors.extend(d.embedding for d in sorted(data, key=lambda d: d.index))

        return vectors

    def embed_query(self, query: str) -> list[float]:
        return self._create([query])[0].embedding

    @property
    def dimension(self) -> int:
        return self._dimension

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _create(self, inputs: list[str]) -> list[Any]:
        import openai

        try:
            resp = self._client.embeddings.create(model=self.model, input=inputs)
        except openai.OpenAIError as exc:
            raise EmbeddingFailed(f"OpenAI embedding request failed: {exc}") from exc

        if len(resp.data) != len(inputs):
            raise EmbeddingFailed(
                f"OpenAI returned {len(resp.data)} embeddings for {len(inputs)} inputs"
            )
        return list(resp.data)
