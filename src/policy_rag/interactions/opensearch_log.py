"""OpenSearch-backed interaction log.

Answers are written with ``create`` so an existing id is never overwritten;
feedback is a partial ``update`` that only touches the ``reaction`` field.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from policy_rag.errors import InteractionConflict, LoggingFailed, UnknownInteraction
from policy_rag.interactions.base import InteractionLog, answers_to_response
from policy_rag.interactions.schemas import (
    LOG_INDEX_MAPPINGS,
    InteractionMetadata,
    InteractionRecord,
    InteractionType,
)
from policy_rag.pipeline.schemas import StructuredAnswer

logger = logging.getLogger(__name__)


class OpenSearchInteractionLog(InteractionLog):
    def __init__(
        self,
        index_name: str = "policy_interaction_logs",
        client: Any | None = None,
        **client_kwargs: Any,
    ):
        from opensearchpy.exceptions import (
            ConflictError,
            NotFoundError,
            OpenSearchException,
        )

        self._conflict = ConflictError
        self._not_found = NotFoundError
        self._errors = OpenSearchException
        self.index_name = index_name

        if client is None:
            from policy_rag.opensearch_client import create_client

            client = create_client(**client_kwargs)
        self._client = client

    def ensure_schema(self) -> None:
        try:
            if self._client.indices.exists(index=self.index_name):
                logger.info("Log index '%s' already exists", self.index_name)
                return
            self._client.indices.create(
                index=self.index_name,
                body={"mappings": LOG_INDEX_MAPPINGS},
            )
        except self._errors as exc:
            raise LoggingFailed(f"Cannot create log index '{self.index_name}': {exc}") from exc
        logger.info("Created log index '%s'", self.index_name)

    def record_answer(
        self,
        interaction_id: str,
        metadata: InteractionMetadata,
        query: str,
        answers: Sequence[StructuredAnswer],
    ) -> None:
        record = InteractionRecord(
            interaction_id=interaction_id,
            metadata=metadata,
            query=query,
            response=answers_to_response(answers),
        )
        try:
            self._client.create(
                index=self.index_name,
                id=interaction_id,
                body=record.to_document(),
            )
        except self._conflict as exc:
            raise InteractionConflict(interaction_id) from exc
        except self._errors as exc:
            raise LoggingFailed(f"Cannot record interaction '{interaction_id}': {exc}") from exc

    def record_feedback(self, interaction_id: str, signal: str) -> None:
        try:
            self._client.update(
                index=self.index_name,
                id=interaction_id,
                body={"doc": {"reaction": signal}},
            )
        except self._not_found as exc:
            raise UnknownInteraction(interaction_id) from exc
        except self._errors as exc:
            raise LoggingFailed(f"Cannot record feedback for '{interaction_id}': {exc}") from exc

    def get(self, interaction_id: str) -> InteractionRecord | None:
        try:
            response = self._client.get(index=self.index_name, id=interaction_id)
        except self._not_found:
            return None
        except self._errors as exc:
            raise LoggingFailed(str(exc)) from exc

        doc = response["_source"]
        metadata = InteractionMetadata(
            user_id=doc.get("user_id", ""),
            channel_id=doc.get("channel_id", ""),
            team_id=doc.get("team_id", ""),
            interaction_type=InteractionType(doc["interaction_type"]),
            llm_model=doc.get("llm_model", ""),
            timestamp=datetime.fromisoformat(doc["timestamp"]),
        )
        return InteractionRecord(
            interaction_id=interaction_id,
            metadata=metadata,
            query=doc.get("query", ""),
            response=doc.get("response", []),
            reaction=doc.get("reaction"),
        )
