"""Embedding providers — OpenAI, Ollama, HuggingFace."""

from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.embeddings.factory import available_providers, get_embedding_provider

__all__ = [
    "EmbeddingProvider",
    "available_providers",
    "get_embedding_provider",
]
