"""Ollama embedding provider — local-first, no API keys needed.

Uses the Ollama REST API (http://localhost:11434) with models like
``nomic-embed-text``, ``mxbai-embed-large``, etc.
"""

from __future__ import annotations

import logging

import httpx

from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.errors import EmbeddingFailed

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_DIM = 768


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embed text via a local Ollama server's ``/api/embed`` endpoint."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        dimension: int = DEFAULT_DIM,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._dimension = dimension
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return self._embed(texts)

    def embed_query(self, query: str) -> list[float]:
        return self._embed([query])[0]

    @property
    def dimension(self) -> int:
        return self._dimension

    def _embed(self, inputs: list[str]) -> list[list[float]]:
        try:
            resp = self._client.post(
                "/api/embed",
                json={"model": self.model, "input": inputs},
            )
            resp.raise_for_status()
            embeddings = resp.json()["embeddings"]
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            raise EmbeddingFailed(f"Ollama embedding request failed: {exc}") from exc

        if len(embeddings) != len(inputs):
            raise EmbeddingFailed(
                f"Ollama returned {len(embeddings)} embeddings for {len(inputs)} inputs"
            )
        return embeddings
