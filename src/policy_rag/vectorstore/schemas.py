"""Data models for vector store operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from policy_rag.chunking.schemas import ChunkMetadata


@dataclass
class VectorRecord:
    """A document chunk with its embedding, ready for storage."""

    id: str
    text: str
    embedding: list[float]
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)


@dataclass(frozen=True)
class SearchResult:
    """A single search result from the vector store."""

    id: str
    text: str
    score: float
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)


def metadata_to_payload(meta: ChunkMetadata) -> dict[str, Any]:
    """Serialise chunk metadata to the stored ``metadata`` object."""
    return {
        "id": meta.document_id,
        "title": meta.title,
        "url": meta.url,
        "scope": meta.scope,
        "section": meta.section,
        "responsible_office": meta.responsible_office,
        "subject_areas": list(meta.subject_areas),
        "effective_date": meta.effective_date,
        "issuance_date": meta.issuance_date,
        "keywords": list(meta.keywords),
        "classifications": list(meta.classifications),
        "chunk_index": meta.chunk_index,
        "start_offset": meta.start_offset,
    }


def payload_to_metadata(payload: dict[str, Any]) -> ChunkMetadata:
    return ChunkMetadata(
        document_id=payload.get("id", ""),
        title=payload.get("title", ""),
        url=payload.get("url", ""),
        scope=payload.get("scope", ""),
        section=payload.get("section", ""),
        responsible_office=payload.get("responsible_office"),
        subject_areas=payload.get("subject_areas") or [],
        effective_date=payload.get("effective_date"),
        issuance_date=payload.get("issuance_date"),
        keywords=payload.get("keywords") or [],
        classifications=payload.get("classifications") or [],
        chunk_index=payload.get("chunk_index", 0),
        start_offset=payload.get("start_offset", 0),
    )
