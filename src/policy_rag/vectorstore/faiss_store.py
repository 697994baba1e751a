"""FAISS vector store — local, zero infrastructure.

Exact inner-product search over L2-normalised vectors (cosine similarity),
addressed by string ids through an ``IndexIDMap2`` so upserts replace entries
in place. When a ``path`` is given the index is loaded from and persisted to
``<path>/<index_name>/`` after every write; a path with nothing saved under it
is an index that does not exist yet.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import numpy as np

from policy_rag.errors import IndexUnavailable
from policy_rag.vectorstore.base import VectorStore
from policy_rag.vectorstore.schemas import (
    SearchResult,
    VectorRecord,
    metadata_to_payload,
    payload_to_metadata,
)

logger = logging.getLogger(__name__)


class FAISSStore(VectorStore):
    """FAISS-backed vector store for development and tests."""

    def __init__(
        self,
        index_name: str = "policy_vectorstore",
        dimension: int = 3072,
        path: str | None = None,
    ):
        try:
            import faiss
        except ImportError as exc:
            raise ImportError(
                "faiss-cpu required: pip install policy-rag[faiss]"
            ) from exc

        self._faiss = faiss
        self.index_name = index_name
        self._dimension = dimension
        self._dir = Path(path) / index_name if path else None

        self._index = None
        self._records: dict[int, dict] = {}  # int id -> {id, text, metadata}
        self._int_ids: dict[str, int] = {}
        self._next_id = 0

        if self._dir is None:
            self.create()
        elif (self._dir / "index.faiss").exists():
            self.load()
        # An on-disk index that was never built stays unavailable until create()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0
        if self._index is None:
            raise IndexUnavailable(f"Index '{self.index_name}' does not exist")

        # Last write wins for duplicate ids within one batch
        latest = {r.id: r for r in records}
        batch = list(latest.values())

        vectors = np.array([r.embedding for r in batch], dtype=np.float32)
        if vectors.shape[1] != self._dimension:
            raise ValueError(
                f"Embedding dimension {vectors.shape[1]} does not match index ({self._dimension})"
            )
        self._faiss.normalize_L2(vectors)

        stale = [self._int_ids[r.id] for r in batch if r.id in self._int_ids]
        if stale:
            self._index.remove_ids(np.array(stale, dtype=np.int64))
            for int_id in stale:
                del self._records[int_id]

        ids = np.arange(self._next_id, self._next_id + len(batch), dtype=np.int64)
        self._index.add_with_ids(vectors, ids)
        for int_id, record in zip(ids.tolist(), batch, strict=True):
            self._records[int_id] = {
                "id": record.id,
                "text": record.text,
                "metadata": record.metadata,
            }
            self._int_ids[record.id] = int_id
        self._next_id += len(batch)

        if self._dir is not None:
            self.save()

        logger.info("FAISSStore upserted %d records (total: %d)", len(batch), self.count())
        return len(batch)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        num_candidates: int = 200,
    ) -> list[SearchResult]:
        # Exact search: the candidate pool is the whole index
        if self._index is None:
            raise IndexUnavailable(f"Index '{self.index_name}' does not exist")
        if self._index.ntotal == 0:
            return []

        query_vec = np.array([query_embedding], dtype=np.float32)
        self._faiss.normalize_L2(query_vec)

        k = min(top_k, self._index.ntotal)
        scores, labels = self._index.search(query_vec, k)

        results: list[SearchResult] = []
        for score, label in zip(scores[0], labels[0], strict=True):
            record = self._records.get(int(label))
            if record is None:
                continue
            results.append(SearchResult(
                id=record["id"],
                text=record["text"],
                score=float(score),
                metadata=record["metadata"],
            ))
        return results

    def exists(self) -> bool:
        return self._index is not None

    def create(self) -> None:
        if self._index is None:
            self._index = self._faiss.IndexIDMap2(self._faiss.IndexFlatIP(self._dimension))
            if self._dir is not None:
                self.save()

    def drop(self) -> None:
        self._index = None
        self._records.clear()
        self._int_ids.clear()
        self._next_id = 0
        if self._dir is not None and self._dir.exists():
            shutil.rmtree(self._dir)
            logger.info("Removed FAISS index directory %s", self._dir)

    def count(self) -> int:
        if self._index is None:
            raise IndexUnavailable(f"Index '{self.index_name}' does not exist")
        return self._index.ntotal

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: str | Path | None = None) -> None:
        """Write the FAISS index and record payloads to disk."""
        target = Path(path) if path else self._dir
        if target is None or self._index is None:
            return
        target.mkdir(parents=True, exist_ok=True)

        self._faiss.write_index(self._index, str(target / "index.faiss"))

        serializable = {
            str(int_id): {
                "id": record["id"],
                "text": record["text"],
                "metadata": metadata_to_payload(record["metadata"]),
            }
            for int_id, record in self._records.items()
        }
        with open(target / "records.json", "w", encoding="utf-8") as f:
            json.dump({"records": serializable, "next_id": self._next_id}, f)

    def load(self, path: str | Path | None = None) -> None:
        """Load a FAISS index and record payloads written by ``save``."""
        source = Path(path) if path else self._dir
        if source is None:
            raise ValueError("No path to load the FAISS index from")

        try:
            self._index = self._faiss.read_index(str(source / "index.faiss"))
            with open(source / "records.json", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, RuntimeError, json.JSONDecodeError) as exc:
            raise IndexUnavailable(f"Cannot load FAISS index from {source}: {exc}") from exc

        self._records = {}
        self._int_ids = {}
        for str_id, record in data["records"].items():
            self._records[int(str_id)] = {
                "id": record["id"],
                "text": record["text"],
                "metadata": payload_to_metadata(record["metadata"]),
            }
            self._int_ids[record["id"]] = int(str_id)

        self._next_id = data.get("next_id", len(self._records))
        logger.info("FAISSStore loaded from %s (%d records)", source, self.count())
