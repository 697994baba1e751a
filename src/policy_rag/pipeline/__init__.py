"""End-to-end pipeline — ingest, query, prompts, structured answers."""

from policy_rag.pipeline.ingest import IngestPipeline
from policy_rag.pipeline.query import QueryPipeline
from policy_rag.pipeline.schemas import (
    APOLOGY_MESSAGE,
    INSUFFICIENT_INFORMATION,
    Citation,
    IngestReport,
    RAGQuery,
    RAGResponse,
    StructuredAnswer,
)
from policy_rag.pipeline.structured import GenerationResult, Malformed, Parsed

__all__ = [
    "APOLOGY_MESSAGE",
    "Citation",
    "GenerationResult",
    "INSUFFICIENT_INFORMATION",
    "IngestPipeline",
    "IngestReport",
    "Malformed",
    "Parsed",
    "QueryPipeline",
    "RAGQuery",
    "RAGResponse",
    "StructuredAnswer",
]
