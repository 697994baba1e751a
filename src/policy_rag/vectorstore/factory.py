"""Vector store factory — registry and lazy import."""

from __future__ import annotations

import importlib
import logging

from policy_rag.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Store registry: (store_key, module_path, class_name)
# ---------------------------------------------------------------------------

_STORE_REGISTRY: list[tuple[str, str, str]] = [
    ("opensearch", "policy_rag.vectorstore.opensearch_store", "OpenSearchStore"),
    ("qdrant", "policy_rag.vectorstore.qdrant_store", "QdrantStore"),
    ("faiss", "policy_rag.vectorstore.faiss_store", "FAISSStore"),
]


def get_vector_store(
    backend: str = "opensearch",
    **kwargs,
) -> VectorStore:
    """Build a vector store by name.

    Args:
        backend: One of ``opensearch``, ``qdrant``, ``faiss``.
        **kwargs: Passed to the store constructor.

    Returns:
        A ``VectorStore`` instance.
    """
    key = backend.lower()

    for reg_key, module_path, cls_name in _STORE_REGISTRY:
        if reg_key == key:
            mod = importlib.import_module(module_path)
            cls = getattr(mod, cls_name)
            return cls(**kwargs)

    available = [k for k, _, _ in _STORE_REGISTRY]
    raise ValueError(f"Unknown vector store '{backend}'. Available: {available}")


def available_stores() -> list[str]:
    """Return names of registered vector stores."""
    return [k for k, _, _ in _STORE_REGISTRY]
