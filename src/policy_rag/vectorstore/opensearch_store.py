"""OpenSearch vector store — k-NN over an HNSW ``knn_vector`` field.

Each entry stores ``text``, ``vector`` and a ``metadata`` object (``id``,
``title``, ``url`` and the rest of the catalogue fields). Cosine similarity is
set in the mapping when the index is created.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from policy_rag.errors import IndexUnavailable
from policy_rag.vectorstore.base import VectorStore
from policy_rag.vectorstore.schemas import (
    SearchResult,
    VectorRecord,
    metadata_to_payload,
    payload_to_metadata,
)

logger = logging.getLogger(__name__)


class OpenSearchStore(VectorStore):
    """OpenSearch vector store with approximate k-NN search."""

    def __init__(
        self,
        index_name: str = "policy_vectorstore",
        dimension: int = 3072,
        client: Any | None = None,
        **client_kwargs: Any,
    ):
        from opensearchpy.exceptions import OpenSearchException

        self._errors = OpenSearchException
        self.index_name = index_name
        self._dimension = dimension

        if client is None:
            from policy_rag.opensearch_client import create_client

            client = create_client(**client_kwargs)
        self._client = client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        actions = []
        for record in records:
            actions.append({"index": {"_index": self.index_name, "_id": record.id}})
            actions.append({
                "text": record.text,
                "vector": record.embedding,
                "metadata": metadata_to_payload(record.metadata),
            })
        body = "\n".join(json.dumps(a) for a in actions) + "\n"

        try:
            response = self._client.bulk(body=body)
            self._client.indices.refresh(index=self.index_name)
        except self._errors as exc:
            raise IndexUnavailable(f"Bulk upsert into '{self.index_name}' failed: {exc}") from exc

        if response.get("errors"):
            failed = [
                item["index"] for item in response.get("items", [])
                if item.get("index", {}).get("error")
            ]
            reason = failed[0]["error"] if failed else "unknown"
            raise IndexUnavailable(
                f"{len(failed)} of {len(records)} records rejected by '{self.index_name}': {reason}"
            )

        logger.info("OpenSearchStore upserted %d records into %s", len(records), self.index_name)
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        num_candidates: int = 200,
    ) -> list[SearchResult]:
        body = {
            "size": top_k,
            "_source": {"excludes": ["vector"]},
            "query": {
                "knn": {
                    "vector": {
                        "vector": query_embedding,
                        "k": max(top_k, num_candidates),
                    }
                }
            },
        }

        try:
            response = self._client.search(index=self.index_name, body=body)
        except self._errors as exc:
            raise IndexUnavailable(f"Search on '{self.index_name}' failed: {exc}") from exc

        results: list[SearchResult] = []
        for hit in response["hits"]["hits"]:
            source = hit["_source"]
            results.append(SearchResult(
                id=hit["_id"],
                text=source.get("text", ""),
                score=hit["_score"] if hit["_score"] is not None else 0.0,
                metadata=payload_to_metadata(source.get("metadata") or {}),
            ))
        return results

    def exists(self) -> bool:
        try:
            return bool(self._client.indices.exists(index=self.index_name))
        except self._errors as exc:
            raise IndexUnavailable(str(exc)) from exc

    def create(self) -> None:
        if self.exists():
            return

        body = {
            "settings": {"index": {"knn": True}},
            "mappings": {
                "properties": {
                    "vector": {
                        "type": "knn_vector",
                        "dimension": self._dimension,
                        "method": {
                            "name": "hnsw",
                            "space_type": "cosinesimil",
                            "engine": "lucene",
                        },
                    },
                    "text": {"type": "text"},
                    "metadata": {
                        "properties": {
                            "id": {"type": "keyword"},
                            "title": {"type": "text"},
                            "url": {"type": "keyword"},
                            "scope": {"type": "keyword"},
                            "section": {"type": "keyword"},
                            "responsible_office": {"type": "keyword"},
                            "subject_areas": {"type": "keyword"},
                            "keywords": {"type": "keyword"},
                            "classifications": {"type": "keyword"},
                            "effective_date": {"type": "keyword"},
                            "issuance_date": {"type": "keyword"},
                            "chunk_index": {"type": "integer"},
                            "start_offset": {"type": "integer"},
                        }
                    },
                }
            },
        }
        try:
            self._client.indices.create(index=self.index_name, body=body)
        except self._errors as exc:
            raise IndexUnavailable(f"Cannot create index '{self.index_name}': {exc}") from exc
        logger.info("Created OpenSearch index '%s' (dim=%d)", self.index_name, self._dimension)

    def drop(self) -> None:
        if not self.exists():
            return
        try:
            self._client.indices.delete(index=self.index_name)
        except self._errors as exc:
            raise IndexUnavailable(f"Cannot delete index '{self.index_name}': {exc}") from exc
        logger.info("Deleted OpenSearch index '%s'", self.index_name)

    def count(self) -> int:
        try:
            return self._client.count(index=self.index_name)["count"]
        except self._errors as exc:
            raise IndexUnavailable(str(exc)) from exc
