"""Render structured answers for a chat surface.

Two pure renderings of the same answers: an ordered list of display blocks
(mrkdwn sections plus a feedback action row) and a plain-text fallback used
when blocks cannot be shown.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from policy_rag.pipeline.prompts import clean_title
from policy_rag.pipeline.schemas import Citation, StructuredAnswer

_MARKDOWN_LINK = re.compile(r"\[(.*?)\]\((.*?)\)")

CITATIONS_HEADER = "*Citations*"
FEEDBACK_PROMPT = "Was this helpful?"


class FeedbackSignal(StrEnum):
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"


_BUTTON_LABELS = {
    FeedbackSignal.THUMBS_UP: "Yes 👍",
    FeedbackSignal.THUMBS_DOWN: "No 👎",
}


def cleanup_content(content: str) -> str:
    """Rewrite ``[title](url)`` links into the surface's ``<url|title>`` form."""
    return _MARKDOWN_LINK.sub(r"<\2|\1>", content)


def format_citation(citation: Citation) -> str:
    return f"<{citation.url}|{clean_title(citation.title)}>"


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _button(signal: FeedbackSignal, interaction_id: str) -> dict[str, Any]:
    return {
        "type": "button",
        "text": {"type": "plain_text", "text": _BUTTON_LABELS[signal], "emoji": True},
        "value": feedback_value(signal, interaction_id),
        "action_id": signal.value,
    }


def to_display_blocks(
    answers: Sequence[StructuredAnswer],
    interaction_id: str,
) -> list[dict[str, Any]]:
    """Build the block list for a full response.

    Each answer gets a content section followed, when it has citations, by a
    ``*Citations*`` header and one section per citation (duplicates kept).
    One feedback prompt and one action row close the response.
    """
    blocks: list[dict[str, Any]] = []

    for answer in answers:
        blocks.append(_section(cleanup_content(answer.content)))
        if answer.citations:
            blocks.append(_section(CITATIONS_HEADER))
            blocks.extend(_section(format_citation(c)) for c in answer.citations)

    blocks.append(_section(FEEDBACK_PROMPT))
    blocks.append({
        "type": "actions",
        "elements": [
            _button(FeedbackSignal.THUMBS_UP, interaction_id),
            _button(FeedbackSignal.THUMBS_DOWN, interaction_id),
        ],
    })
    return blocks


def to_plain_text(answers: Sequence[StructuredAnswer]) -> str:
    """Plain-text fallback carrying every answer and every citation url."""
    parts: list[str] = []
    for answer in answers:
        parts.append(answer.content + "\n\n")
        if answer.citations:
            parts.append(CITATIONS_HEADER + "\n")
            parts.extend(format_citation(c) + "\n" for c in answer.citations)
    return "".join(parts)


# ---------------------------------------------------------------------------
# Feedback action values
# ---------------------------------------------------------------------------


def feedback_value(signal: FeedbackSignal, interaction_id: str) -> str:
    return f"{signal.value}-{interaction_id}"


def parse_feedback_value(value: str) -> tuple[FeedbackSignal, str]:
    """Split an action value ``<signal>-<interaction id>``.

    Raises:
        ValueError: The value has no separator, an unknown signal, or an
            empty interaction id.
    """
    signal, sep, interaction_id = value.partition("-")
    if not sep or not interaction_id:
        raise ValueError(f"Malformed feedback value: {value!r}")
    return FeedbackSignal(signal), interaction_id
