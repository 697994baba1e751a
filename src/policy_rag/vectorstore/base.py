"""Abstract base class for vector stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from policy_rag.vectorstore.schemas import SearchResult, VectorRecord


class VectorStore(ABC):
    """Interface for vector store backends.

    A store is bound to one named index whose similarity function (cosine) is
    fixed when the index is created. Backend failures raise
    ``IndexUnavailable``; they are never reported as an empty result.
    """

    index_name: str = ""

    @abstractmethod
    def upsert(self, records: list[VectorRecord]) -> int:
        """Insert records, replacing any existing entry with the same id.

        Returns:
            Number of records written.
        """

    @abstractmethod
    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        num_candidates: int = 200,
    ) -> list[SearchResult]:
        """Search for similar chunks.

        Args:
            query_embedding: The query vector.
            top_k: Maximum results to return.
            num_candidates: Candidate pool the backend may examine per query.

        Returns:
            List of ``SearchResult`` in the backend's ranking order
            (highest similarity first).
        """

    @abstractmethod
    def exists(self) -> bool:
        """Return True when the index exists."""

    @abstractmethod
    def create(self) -> None:
        """Create the index if it does not exist."""

    @abstractmethod
    def drop(self) -> None:
        """Delete the index and everything in it. No-op when absent."""

    def recreate(self) -> None:
        """Drop and create the index — a clean rebuild."""
        self.drop()
        self.create()

    @abstractmethod
    def count(self) -> int:
        """Return the number of records in the index."""
