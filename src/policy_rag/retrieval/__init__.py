"""Retrieval — query embedding + similarity search."""

from policy_rag.retrieval.retriever import Retriever
from policy_rag.retrieval.schemas import RetrievalConfig, RetrievalResult

__all__ = ["Retriever", "RetrievalConfig", "RetrievalResult"]
