"""Retriever — embed query, search the vector index, apply a score floor."""

from __future__ import annotations

import logging

from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.retrieval.schemas import RetrievalConfig, RetrievalResult
from policy_rag.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)


class Retriever:
    """Orchestrates embedding → search → score filter."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
    ):
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store

    def retrieve(
        self,
        query: str,
        config: RetrievalConfig | None = None,
    ) -> RetrievalResult:
        """Run a retrieval: one query embedding, one k-NN search.

        Result order is the index's ranking; ties keep the order the index
        returned them in.

        Raises:
            EmbeddingFailed: The query could not be embedded.
            IndexUnavailable: The index could not be searched.
        """
        cfg = config or RetrievalConfig()

        query_embedding = self.embedding_provider.embed_query(query)
        raw_results = self.vector_store.search(
            query_embedding=query_embedding,
            top_k=cfg.top_k,
            num_candidates=cfg.num_candidates,
        )
        total_candidates = len(raw_results)

        if cfg.min_score > 0:
            raw_results = [r for r in raw_results if r.score >= cfg.min_score]

        logger.info(
            "Retrieved %d results for query (candidates=%d, min_score=%.2f)",
            len(raw_results),
            total_candidates,
            cfg.min_score,
        )

        return RetrievalResult(
            query=query,
            results=raw_results[: cfg.top_k],
            total_candidates=total_candidates,
        )
