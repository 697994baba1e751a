"""Abstract base class for all chunkers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from policy_rag.chunking.schemas import Chunk
from policy_rag.documents.schemas import SourceDocument


class BaseChunker(ABC):
    """Interface for document chunking strategies."""

    @abstractmethod
    def split(self, document: SourceDocument) -> list[Chunk]:
        """Split a document into ordered chunks.

        Args:
            document: The source document.

        Returns:
            List of ``Chunk`` objects carrying a copy of the document metadata.
        """

    @classmethod
    def strategy_name(cls) -> str:
        """Return human-readable strategy name."""
        return cls.__name__
