"""Document chunking — recursive, size-bounded, overlapping."""

from policy_rag.chunking.base import BaseChunker
from policy_rag.chunking.recursive_chunker import RecursiveChunker
from policy_rag.chunking.schemas import Chunk, ChunkMetadata

__all__ = ["BaseChunker", "Chunk", "ChunkMetadata", "RecursiveChunker"]
