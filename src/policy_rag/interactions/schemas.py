"""Data models for the interaction log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class InteractionType(StrEnum):
    MENTION = "mention"
    COMMAND = "command"


@dataclass(frozen=True)
class InteractionMetadata:
    """Who asked, where, and which model answered."""

    user_id: str
    channel_id: str
    team_id: str
    interaction_type: InteractionType
    llm_model: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_document(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "channel_id": self.channel_id,
            "team_id": self.team_id,
            "interaction_type": self.interaction_type.value,
            "llm_model": self.llm_model,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class InteractionRecord:
    """One logged question/answer exchange, optionally annotated with feedback."""

    interaction_id: str
    metadata: InteractionMetadata
    query: str
    response: list[dict[str, Any]]
    reaction: str | None = None

    def to_document(self) -> dict[str, Any]:
        doc = self.metadata.to_document()
        doc["query"] = self.query
        doc["response"] = self.response
        if self.reaction is not None:
            doc["reaction"] = self.reaction
        return doc


# Field mappings for a search-engine-backed log
LOG_INDEX_MAPPINGS: dict[str, Any] = {
    "properties": {
        "user_id": {"type": "keyword"},
        "channel_id": {"type": "keyword"},
        "team_id": {"type": "keyword"},
        "interaction_type": {"type": "keyword"},
        "llm_model": {"type": "keyword"},
        "query": {"type": "text"},
        "response": {"type": "object"},
        "reaction": {"type": "keyword"},
        "timestamp": {"type": "date"},
    }
}
