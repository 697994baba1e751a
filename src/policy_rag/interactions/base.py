"""Abstract base class for interaction logs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from policy_rag.interactions.schemas import InteractionMetadata, InteractionRecord
from policy_rag.pipeline.schemas import StructuredAnswer


class InteractionLog(ABC):
    """Append-only store of answered questions plus their feedback."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create the backing structure if absent; no-op otherwise."""

    @abstractmethod
    def record_answer(
        self,
        interaction_id: str,
        metadata: InteractionMetadata,
        query: str,
        answers: Sequence[StructuredAnswer],
    ) -> None:
        """Write a new interaction.

        Raises:
            InteractionConflict: ``interaction_id`` is already recorded.
            LoggingFailed: The write failed.
        """

    @abstractmethod
    def record_feedback(self, interaction_id: str, signal: str) -> None:
        """Set the reaction on an existing interaction (last click wins).

        Raises:
            UnknownInteraction: ``interaction_id`` was never recorded.
            LoggingFailed: The update failed.
        """

    @abstractmethod
    def get(self, interaction_id: str) -> InteractionRecord | None:
        """Return a recorded interaction, or ``None``."""

    @classmethod
    def backend_name(cls) -> str:
        return cls.__name__


def answers_to_response(answers: Sequence[StructuredAnswer]) -> list[dict]:
    return [a.model_dump() for a in answers]
