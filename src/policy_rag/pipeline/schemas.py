"""Data models for the RAG pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from policy_rag.vectorstore.schemas import SearchResult

INSUFFICIENT_INFORMATION = "Insufficient information to answer this question."
APOLOGY_MESSAGE = (
    "Sorry, something went wrong trying to answer your question. Please try again."
)


class Citation(BaseModel):
    """A cited source document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    title: str
    url: str


class StructuredAnswer(BaseModel):
    """One answer emitted through the ``answer_question`` tool."""

    model_config = ConfigDict(extra="forbid")

    content: str
    citations: list[Citation]

    @classmethod
    def insufficient(cls) -> StructuredAnswer:
        return cls(content=INSUFFICIENT_INFORMATION, citations=[])

    @classmethod
    def apology(cls) -> StructuredAnswer:
        return cls(content=APOLOGY_MESSAGE, citations=[])

    @property
    def is_insufficient(self) -> bool:
        return self.content.strip() == INSUFFICIENT_INFORMATION


@dataclass
class RAGQuery:
    """Input to the query pipeline."""

    question: str
    model: str | None = None
    top_k: int | None = None


@dataclass
class RAGResponse:
    """Output of the query pipeline."""

    question: str
    answers: list[StructuredAnswer] = field(default_factory=list)
    sources: list[SearchResult] = field(default_factory=list)
    model: str = ""
    retrieval_count: int = 0
    malformed: bool = False


@dataclass
class IngestReport:
    """Result of an ingestion run."""

    source: str
    documents_loaded: int = 0
    documents_filtered: int = 0
    documents_skipped: int = 0
    chunks_created: int = 0
    chunks_stored: int = 0
    batches_written: int = 0
    index_recreated: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        """Documents left out for any reason."""
        return self.documents_filtered + self.documents_skipped
