"""Chat-facing orchestration for one question or one feedback click.

A delivery adapter (chat bot, CLI) builds a ``QuestionRequest`` from its
event and supplies a ``deliver`` callback; ``PolicyAssistant`` does the rest:
clean the question, acknowledge it, answer it, render the reply, hand it
over, and only then write the interaction log.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from policy_rag.delivery.formatter import parse_feedback_value, to_display_blocks, to_plain_text
from policy_rag.errors import CapabilityError, LoggingFailed
from policy_rag.interactions.base import InteractionLog
from policy_rag.interactions.schemas import InteractionMetadata, InteractionType
from policy_rag.pipeline.query import QueryPipeline
from policy_rag.pipeline.schemas import StructuredAnswer

logger = logging.getLogger(__name__)

_MENTION = re.compile(r"<@[^>]*>")

THANK_YOU = "Thank you for your feedback! 👍"


@dataclass
class QuestionRequest:
    """One incoming question as seen by a delivery adapter."""

    interaction_id: str
    text: str
    user_id: str = ""
    channel_id: str = ""
    team_id: str = ""
    interaction_type: InteractionType = InteractionType.COMMAND
    command: str | None = None


@dataclass
class Reply:
    """A message for the adapter to post; ``blocks`` is None for plain text."""

    text: str
    blocks: list[dict[str, Any]] | None = None


def strip_mentions(text: str) -> str:
    return _MENTION.sub("", text).strip()


class PolicyAssistant:
    """Answers policy questions for a chat surface."""

    def __init__(
        self,
        query_pipeline: QueryPipeline,
        interaction_log: InteractionLog,
        default_model: str | None = None,
        command_models: Mapping[str, str] | None = None,
        default_command: str = "/policy",
    ):
        self.query_pipeline = query_pipeline
        self.interaction_log = interaction_log
        self.default_model = default_model or query_pipeline.llm_provider.model
        self.command_models = dict(command_models or {})
        self.default_command = default_command

    def resolve_model(self, command: str | None) -> str:
        if command and command in self.command_models:
            return self.command_models[command]
        return self.default_model

    def usage_hint(self, command: str | None = None) -> str:
        command = command or self.default_command
        return (
            "You can ask me anything about university policy. "
            f"ex: {command} how much vacation time can I carry over?"
        )

    @staticmethod
    def initial_response_text(model: str, question: str) -> str:
        return (
            f"Policy assistant, model {model}, dense vector + knn retrieval. \n\n"
            f" You asked me: '{question}'. Getting an answer to your question..."
        )

    def handle_question(
        self,
        request: QuestionRequest,
        deliver: Callable[[Reply], None],
    ) -> list[StructuredAnswer]:
        """Answer one question end to end.

        Returns the answers that were delivered (empty when only a usage hint
        was sent). Capability failures are delivered as the apology answer
        and are not logged as interactions; a failing interaction-log write
        is reported and swallowed after the reply has gone out.
        """
        question = strip_mentions(request.text)
        if not question:
            deliver(Reply(text=self.usage_hint(request.command)))
            return []

        model = self.resolve_model(request.command)
        deliver(Reply(text=self.initial_response_text(model, question)))

        try:
            answers = self.query_pipeline.answer(question, model=model)
        except CapabilityError:
            logger.exception("Could not answer interaction %s", request.interaction_id)
            answers = [StructuredAnswer.apology()]
            deliver(Reply(text=to_plain_text(answers)))
            return answers

        deliver(Reply(
            text=to_plain_text(answers),
            blocks=to_display_blocks(answers, request.interaction_id),
        ))

        metadata = InteractionMetadata(
            user_id=request.user_id,
            channel_id=request.channel_id,
            team_id=request.team_id,
            interaction_type=request.interaction_type,
            llm_model=model,
        )
        try:
            self.interaction_log.record_answer(request.interaction_id, metadata, question, answers)
        except LoggingFailed:
            logger.exception("Error logging interaction %s", request.interaction_id)

        return answers

    def handle_feedback(self, value: str) -> str:
        """Record a feedback click and return the acknowledgement text.

        Raises:
            ValueError: ``value`` is not a ``<signal>-<interaction id>`` pair.
        """
        signal, interaction_id = parse_feedback_value(value)
        try:
            self.interaction_log.record_feedback(interaction_id, signal.value)
        except LoggingFailed:
            logger.exception("Error logging feedback for interaction %s", interaction_id)
        return THANK_YOU
