"""Qdrant vector store — production-grade alternative to OpenSearch.

Requires the ``qdrant`` extra. Supports Qdrant Cloud, a local server, an
on-disk path, or an in-memory instance for tests.
"""

from __future__ import annotations

import logging

from policy_rag.errors import IndexUnavailable
from policy_rag.vectorstore.base import VectorStore
from policy_rag.vectorstore.schemas import (
    SearchResult,
    VectorRecord,
    metadata_to_payload,
    payload_to_metadata,
)

logger = logging.getLogger(__name__)


class QdrantStore(VectorStore):
    """Qdrant-backed vector store (cosine distance)."""

    def __init__(
        self,
        index_name: str = "policy_vectorstore",
        dimension: int = 3072,
        url: str | None = None,
        api_key: str | None = None,
        path: str | None = None,
    ):
        try:
            from qdrant_client import QdrantClient, models
            from qdrant_client.http.exceptions import (
                ResponseHandlingException,
                UnexpectedResponse,
            )
        except ImportError as exc:
            raise ImportError(
                "qdrant-client required: pip install policy-rag[qdrant]"
            ) from exc

        self._models = models
        # Local (path/in-memory) mode raises ValueError for a missing collection
        self._errors = (UnexpectedResponse, ResponseHandlingException, ValueError)
        self.index_name = index_name
        self._dimension = dimension

        if url:
            self._client = QdrantClient(url=url, api_key=api_key)
        elif path:
            self._client = QdrantClient(path=path)
        else:
            self._client = QdrantClient(":memory:")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        points = []
        for record in records:
            points.append(self._models.PointStruct(
                id=record.id,
                vector=record.embedding,
                payload={
                    "text": record.text,
                    "metadata": metadata_to_payload(record.metadata),
                },
            ))

        try:
            self._client.upsert(collection_name=self.index_name, points=points, wait=True)
        except self._errors as exc:
            raise IndexUnavailable(f"Upsert into '{self.index_name}' failed: {exc}") from exc

        logger.info("QdrantStore upserted %d records into %s", len(records), self.index_name)
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        num_candidates: int = 200,
    ) -> list[SearchResult]:
        try:
            response = self._client.query_points(
                collection_name=self.index_name,
                query=query_embedding,
                limit=top_k,
                search_params=self._models.SearchParams(hnsw_ef=max(top_k, num_candidates)),
                with_payload=True,
            )
        except self._errors as exc:
            raise IndexUnavailable(f"Search on '{self.index_name}' failed: {exc}") from exc

        results: list[SearchResult] = []
        for point in response.points:
            payload = point.payload or {}
            results.append(SearchResult(
                id=str(point.id),
                text=payload.get("text", ""),
                score=point.score if point.score is not None else 0.0,
                metadata=payload_to_metadata(payload.get("metadata") or {}),
            ))
        return results

    def exists(self) -> bool:
        try:
            return self._client.collection_exists(self.index_name)
        except self._errors as exc:
            raise IndexUnavailable(str(exc)) from exc

    def create(self) -> None:
        if self.exists():
            return
        try:
            self._client.create_collection(
                collection_name=self.index_name,
                vectors_config=self._models.VectorParams(
                    size=self._dimension,
                    distance=self._models.Distance.COSINE,
                ),
            )
        except self._errors as exc:
            raise IndexUnavailable(f"Cannot create collection '{self.index_name}': {exc}") from exc
        logger.info("Created Qdrant collection '%s' (dim=%d)", self.index_name, self._dimension)

    def drop(self) -> None:
        try:
            self._client.delete_collection(self.index_name)
        except self._errors as exc:
            raise IndexUnavailable(f"Cannot delete collection '{self.index_name}': {exc}") from exc

    def count(self) -> int:
        try:
            return self._client.count(collection_name=self.index_name, exact=True).count
        except self._errors as exc:
            raise IndexUnavailable(str(exc)) from exc
