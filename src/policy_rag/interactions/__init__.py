"""Interaction log — one record per answered question, plus feedback."""

from policy_rag.interactions.base import InteractionLog
from policy_rag.interactions.factory import get_interaction_log
from policy_rag.interactions.memory_log import MemoryInteractionLog
from policy_rag.interactions.schemas import (
    InteractionMetadata,
    InteractionRecord,
    InteractionType,
)

__all__ = [
    "InteractionLog",
    "InteractionMetadata",
    "InteractionRecord",
    "InteractionType",
    "MemoryInteractionLog",
    "get_interaction_log",
]
