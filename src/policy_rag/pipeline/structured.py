"""Parse forced tool calls into structured answers.

A generation either parses (``Parsed``) or does not (``Malformed``); callers
handle both variants explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from policy_rag.llm.base import Completion
from policy_rag.pipeline.schemas import StructuredAnswer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parsed:
    answers: list[StructuredAnswer] = field(default_factory=list)


@dataclass(frozen=True)
class Malformed:
    reason: str
    raw: str = ""


GenerationResult = Parsed | Malformed


def parse_completion(completion: Completion, tool_name: str) -> GenerationResult:
    """Turn every tool call in ``completion`` into a ``StructuredAnswer``.

    No tool call, a call to any other function, or arguments that do not
    validate against the answer schema make the whole result ``Malformed``.
    """
    if not completion.tool_calls:
        return Malformed(reason="model returned no tool call", raw=completion.text)

    answers: list[StructuredAnswer] = []
    for call in completion.tool_calls:
        if call.name != tool_name:
            return Malformed(reason=f"unexpected tool '{call.name}'", raw=call.arguments)
        try:
            answers.append(StructuredAnswer.model_validate_json(call.arguments))
        except ValidationError as exc:
            return Malformed(reason=f"invalid arguments: {exc.error_count()} error(s)", raw=call.arguments)

    return Parsed(answers=answers)
