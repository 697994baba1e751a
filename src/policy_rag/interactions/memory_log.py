"""In-memory interaction log for tests and local CLI runs."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from policy_rag.errors import InteractionConflict, UnknownInteraction
from policy_rag.interactions.base import InteractionLog, answers_to_response
from policy_rag.interactions.schemas import InteractionMetadata, InteractionRecord
from policy_rag.pipeline.schemas import StructuredAnswer

logger = logging.getLogger(__name__)


class MemoryInteractionLog(InteractionLog):
    def __init__(self):
        self._records: dict[str, InteractionRecord] = {}

    def ensure_schema(self) -> None:
        return None

    def record_answer(
        self,
        interaction_id: str,
        metadata: InteractionMetadata,
        query: str,
        answers: Sequence[StructuredAnswer],
    ) -> None:
        if interaction_id in self._records:
            raise InteractionConflict(interaction_id)
        self._records[interaction_id] = InteractionRecord(
            interaction_id=interaction_id,
            metadata=metadata,
            query=query,
            response=answers_to_response(answers),
        )
        logger.debug("Recorded interaction %s", interaction_id)

    def record_feedback(self, interaction_id: str, signal: str) -> None:
        record = self._records.get(interaction_id)
        if record is None:
            raise UnknownInteraction(interaction_id)
        record.reaction = signal

    def get(self, interaction_id: str) -> InteractionRecord | None:
        return self._records.get(interaction_id)

    def __len__(self) -> int:
        return len(self._records)
