"""Interaction log factory — registry and lazy import."""

from __future__ import annotations

import importlib

from policy_rag.interactions.base import InteractionLog

_LOG_REGISTRY: list[tuple[str, str, str]] = [
    ("opensearch", "policy_rag.interactions.opensearch_log", "OpenSearchInteractionLog"),
    ("memory", "policy_rag.interactions.memory_log", "MemoryInteractionLog"),
]


def get_interaction_log(backend: str = "opensearch", **kwargs) -> InteractionLog:
    """Build an interaction log by name (``opensearch`` or ``memory``)."""
    key = backend.lower()

    for reg_key, module_path, cls_name in _LOG_REGISTRY:
        if reg_key == key:
            mod = importlib.import_module(module_path)
            return getattr(mod, cls_name)(**kwargs)

    available = [k for k, _, _ in _LOG_REGISTRY]
    raise ValueError(f"Unknown interaction log '{backend}'. Available: {available}")
