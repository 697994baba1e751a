"""HuggingFace/sentence-transformers embedding provider.

Runs locally via ``sentence-transformers``. Requires the ``huggingface`` extra.
"""

from __future__ import annotations

import logging
from typing import Any

from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.errors import EmbeddingFailed

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "all-MiniLM-L6-v2"


class HuggingFaceEmbeddingProvider(EmbeddingProvider):
    """Embed text locally using sentence-transformers."""

    def __init__(self, model: str = DEFAULT_MODEL, device: str | None = None):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as exc:
            raise ImportError(
                "sentence-transformers required: pip install policy-rag[huggingface]"
            ) from exc

        self.model = model
        self._model: Any = SentenceTransformer(model, device=device)
        self._dim: int = self._model.get_sentence_embedding_dimension()
        logger.info("Loaded HF model %s (dim=%d)", model, self._dim)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return [vec.tolist() for vec in self._encode(texts)]

    def embed_query(self, query: str) -> list[float]:
        return self._encode([query])[0].tolist()

    @property
    def dimension(self) -> int:
        return self._dim

    def _encode(self, texts: list[str]) -> Any:
        try:
            return self._model.encode(texts, show_progress_bar=False)
        except (RuntimeError, ValueError) as exc:
            raise EmbeddingFailed(f"Local embedding failed: {exc}") from exc
