"""Tests for interaction logs — in-memory and OpenSearch (mock client)."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from opensearchpy.exceptions import ConflictError, NotFoundError, OpenSearchException

from policy_rag.errors import InteractionConflict, LoggingFailed, UnknownInteraction
from policy_rag.interactions.base import InteractionLog
from policy_rag.interactions.factory import get_interaction_log
from policy_rag.interactions.memory_log import MemoryInteractionLog
from policy_rag.interactions.opensearch_log import OpenSearchInteractionLog
from policy_rag.interactions.schemas import (
    LOG_INDEX_MAPPINGS,
    InteractionMetadata,
    InteractionType,
)
from policy_rag.pipeline.schemas import Citation, StructuredAnswer

ANSWERS = [
    StructuredAnswer(
        content="Up to 384 hours.",
        citations=[Citation(title="PPSM-2.210", url="https://x/ppsm")],
    ),
]


@pytest.fixture
def metadata() -> InteractionMetadata:
    return InteractionMetadata(
        user_id="U123",
        channel_id="C456",
        team_id="T789",
        interaction_type=InteractionType.MENTION,
        llm_model="gpt-4o",
        timestamp=datetime(2024, 3, 1, 12, 0, tzinfo=UTC),
    )


# ---------------------------------------------------------------------------
# In-memory log
# ---------------------------------------------------------------------------


class TestMemoryInteractionLog:
    @pytest.fixture
    def log(self) -> MemoryInteractionLog:
        log = MemoryInteractionLog()
        log.ensure_schema()
        return log

    def test_is_interaction_log(self):
        assert issubclass(MemoryInteractionLog, InteractionLog)

    def test_record_answer(self, log: MemoryInteractionLog, metadata: InteractionMetadata):
        log.record_answer("1700.01", metadata, "How much vacation?", ANSWERS)
        record = log.get("1700.01")
        assert record is not None
        assert record.query == "How much vacation?"
        assert record.response[0]["citations"][0]["url"] == "https://x/ppsm"
        assert record.reaction is None

    def test_duplicate_id_conflicts(self, log: MemoryInteractionLog, metadata: InteractionMetadata):
        log.record_answer("1700.01", metadata, "first", ANSWERS)
        with pytest.raises(InteractionConflict) as exc_info:
            log.record_answer("1700.01", metadata, "second", ANSWERS)
        assert exc_info.value.interaction_id == "1700.01"
        assert log.get("1700.01").query == "first"

    def test_feedback_sets_reaction(self, log: MemoryInteractionLog, metadata: InteractionMetadata):
        log.record_answer("1700.01", metadata, "q", ANSWERS)
        log.record_feedback("1700.01", "thumbs_up")
        assert log.get("1700.01").reaction == "thumbs_up"

    def test_repeated_feedback_overwrites(self, log: MemoryInteractionLog, metadata: InteractionMetadata):
        log.record_answer("1700.01", metadata, "q", ANSWERS)
        log.record_feedback("1700.01", "thumbs_up")
        log.record_feedback("1700.01", "thumbs_down")
        assert log.get("1700.01").reaction == "thumbs_down"

    def test_feedback_for_unknown_interaction(self, log: MemoryInteractionLog):
        with pytest.raises(UnknownInteraction) as exc_info:
            log.record_feedback("never-seen", "thumbs_up")
        assert isinstance(exc_info.value, LoggingFailed)
        assert log.get("never-seen") is None
        assert len(log) == 0


# ---------------------------------------------------------------------------
# OpenSearch log
# ---------------------------------------------------------------------------


class TestOpenSearchInteractionLog:
    @pytest.fixture
    def client(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def log(self, client: MagicMock) -> OpenSearchInteractionLog:
        return OpenSearchInteractionLog(index_name="policy_logs", client=client)

    def test_ensure_schema_creates_mappings(self, log: OpenSearchInteractionLog, client: MagicMock):
        client.indices.exists.return_value = False
        log.ensure_schema()
        client.indices.create.assert_called_once_with(
            index="policy_logs", body={"mappings": LOG_INDEX_MAPPINGS},
        )
        props = LOG_INDEX_MAPPINGS["properties"]
        assert props["reaction"] == {"type": "keyword"}
        assert props["timestamp"] == {"type": "date"}

    def test_ensure_schema_is_idempotent(self, log: OpenSearchInteractionLog, client: MagicMock):
        client.indices.exists.return_value = True
        log.ensure_schema()
        log.ensure_schema()
        client.indices.create.assert_not_called()

    def test_record_answer_uses_create(
        self, log: OpenSearchInteractionLog, client: MagicMock, metadata: InteractionMetadata,
    ):
        log.record_answer("1700.01", metadata, "How much vacation?", ANSWERS)

        kwargs = client.create.call_args.kwargs
        assert kwargs["index"] == "policy_logs"
        assert kwargs["id"] == "1700.01"
        body = kwargs["body"]
        assert body["user_id"] == "U123"
        assert body["interaction_type"] == "mention"
        assert body["llm_model"] == "gpt-4o"
        assert body["query"] == "How much vacation?"
        assert body["response"] == [a.model_dump() for a in ANSWERS]
        assert body["timestamp"] == "2024-03-01T12:00:00+00:00"
        assert "reaction" not in body
        client.index.assert_not_called()

    def test_conflict_maps_to_interaction_conflict(
        self, log: OpenSearchInteractionLog, client: MagicMock, metadata: InteractionMetadata,
    ):
        client.create.side_effect = ConflictError(409, "version_conflict_engine_exception", {})
        with pytest.raises(InteractionConflict):
            log.record_answer("1700.01", metadata, "q", ANSWERS)

    def test_other_errors_map_to_logging_failed(
        self, log: OpenSearchInteractionLog, client: MagicMock, metadata: InteractionMetadata,
    ):
        client.create.side_effect = OpenSearchException("cluster red")
        with pytest.raises(LoggingFailed):
            log.record_answer("1700.01", metadata, "q", ANSWERS)

    def test_feedback_is_partial_update(self, log: OpenSearchInteractionLog, client: MagicMock):
        log.record_feedback("1700.01", "thumbs_down")
        client.update.assert_called_once_with(
            index="policy_logs", id="1700.01", body={"doc": {"reaction": "thumbs_down"}},
        )

    def test_feedback_for_unknown_interaction(self, log: OpenSearchInteractionLog, client: MagicMock):
        client.update.side_effect = NotFoundError(404, "document_missing_exception", {})
        with pytest.raises(UnknownInteraction):
            log.record_feedback("never-seen", "thumbs_up")

    def test_get_round_trip(self, log: OpenSearchInteractionLog, client: MagicMock):
        client.get.return_value = {"_source": {
            "user_id": "U1",
            "channel_id": "C1",
            "team_id": "T1",
            "interaction_type": "command",
            "llm_model": "gpt-4o-mini",
            "query": "q",
            "response": [],
            "reaction": "thumbs_up",
            "timestamp": "2024-03-01T12:00:00+00:00",
        }}
        record = log.get("1700.01")
        assert record.metadata.interaction_type is InteractionType.COMMAND
        assert record.reaction == "thumbs_up"

    def test_get_missing_returns_none(self, log: OpenSearchInteractionLog, client: MagicMock):
        client.get.side_effect = NotFoundError(404, "not_found", {})
        assert log.get("nope") is None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestInteractionLogFactory:
    def test_memory(self):
        assert isinstance(get_interaction_log("memory"), MemoryInteractionLog)

    def test_opensearch_with_client(self):
        log = get_interaction_log("opensearch", client=MagicMock(), index_name="logs")
        assert isinstance(log, OpenSearchInteractionLog)
        assert log.index_name == "logs"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown interaction log"):
            get_interaction_log("sqlite")
