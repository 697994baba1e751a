"""Corpus loading — policy metadata and body text."""

from policy_rag.documents.loader import CorpusLoader
from policy_rag.documents.schemas import SectionLoadResult, SourceDocument

__all__ = [
    "CorpusLoader",
    "SectionLoadResult",
    "SourceDocument",
]
