"""Vector store backends — OpenSearch, Qdrant, FAISS."""

from policy_rag.vectorstore.base import VectorStore
from policy_rag.vectorstore.factory import available_stores, get_vector_store
from policy_rag.vectorstore.schemas import SearchResult, VectorRecord

__all__ = [
    "SearchResult",
    "VectorRecord",
    "VectorStore",
    "available_stores",
    "get_vector_store",
]
