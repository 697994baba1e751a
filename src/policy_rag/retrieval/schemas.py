"""Data models for retrieval operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from policy_rag.vectorstore.schemas import SearchResult


@dataclass
class RetrievalConfig:
    """Configuration for a retrieval operation."""

    top_k: int = 5
    num_candidates: int = 200
    min_score: float = 0.0


@dataclass
class RetrievalResult:
    """Result of a retrieval operation."""

    query: str
    results: list[SearchResult] = field(default_factory=list)
    total_candidates: int = 0
