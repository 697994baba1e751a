"""Data models for chunks."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from policy_rag.documents.schemas import SourceDocument

# Namespace for deterministic chunk ids (re-ingestion overwrites, never duplicates)
_CHUNK_NAMESPACE = uuid.UUID("5b0c6f7e-4f7a-4b8e-9d55-0c3a7d2f1e61")


@dataclass(frozen=True)
class ChunkMetadata:
    """Metadata carried by each chunk — a copy of its document's catalogue entry."""

    document_id: str = ""
    title: str = ""
    url: str = ""
    scope: str = ""
    section: str = ""
    responsible_office: str | None = None
    subject_areas: list[str] = field(default_factory=list)
    effective_date: str | None = None
    issuance_date: str | None = None
    keywords: list[str] = field(default_factory=list)
    classifications: list[str] = field(default_factory=list)
    chunk_index: int = 0
    start_offset: int = 0

    @classmethod
    def from_document(
        cls,
        document: SourceDocument,
        chunk_index: int = 0,
        start_offset: int = 0,
    ) -> ChunkMetadata:
        return cls(
            document_id=document.id,
            title=document.title,
            url=document.url,
            scope=document.scope,
            section=document.section,
            responsible_office=document.responsible_office,
            subject_areas=list(document.subject_areas),
            effective_date=document.effective_date,
            issuance_date=document.issuance_date,
            keywords=list(document.keywords),
            classifications=list(document.classifications),
            chunk_index=chunk_index,
            start_offset=start_offset,
        )


@dataclass
class Chunk:
    """A single retrievable piece of a document."""

    text: str
    metadata: ChunkMetadata
    chunk_index: int = 0
    total_chunks: int = 0

    @property
    def id(self) -> str:
        """Deterministic id derived from the owning document and position."""
        key = f"{self.metadata.document_id}#{self.chunk_index}"
        return str(uuid.uuid5(_CHUNK_NAMESPACE, key))
