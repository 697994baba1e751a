"""Prompt templates and the answer tool contract for the query pipeline."""

from __future__ import annotations

from collections.abc import Sequence

from policy_rag.llm.base import ChatMessage, ToolSpec
from policy_rag.pipeline.schemas import INSUFFICIENT_INFORMATION
from policy_rag.vectorstore.schemas import SearchResult

ANSWER_TOOL_NAME = "answer_question"

# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = f"""\
You are a helpful assistant who is an expert in the policies contained in the \
documents below. You will be provided with several documents, each delimited \
by triple quotes, and then asked a question.
Your task is to answer the question in nicely formatted markdown using only \
the provided documents and to cite the documents used to answer the question.
If the documents do not contain the information needed to answer this \
question then simply write: "{INSUFFICIENT_INFORMATION}"
If an answer to the question is provided, it must be annotated with a \
citation. Only call '{ANSWER_TOOL_NAME}' once after your entire answer has \
been formulated.
"""

# ---------------------------------------------------------------------------
# Tool contract
# ---------------------------------------------------------------------------

ANSWER_TOOL = ToolSpec(
    name=ANSWER_TOOL_NAME,
    description="Answer a question and provide citations",
    parameters={
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": {
            "content": {
                "type": "string",
                "description": "The content of the answer to the question, in markdown format",
            },
            "citations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {
                            "type": "string",
                            "description": "The title of the document cited",
                        },
                        "url": {
                            "type": "string",
                            "format": "uri",
                            "description": "The url of the document cited",
                        },
                    },
                    "required": ["title", "url"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["content", "citations"],
        "additionalProperties": False,
    },
)


def clean_title(title: str) -> str:
    """Strip double quotes so titles cannot break the triple-quote delimiters."""
    return title.replace('"', "")


def format_evidence(results: Sequence[SearchResult]) -> str:
    """Format retrieved chunks, each triple-quoted and tagged with its source."""
    parts = []
    for r in results:
        title = clean_title(r.metadata.title)
        parts.append(f'"""{r.text}\n\n-from [{title}]({r.metadata.url})"""')
    return "\n\n".join(parts)


def build_messages(
    question: str,
    results: Sequence[SearchResult],
    system_prompt: str = SYSTEM_PROMPT,
) -> list[ChatMessage]:
    """Build the system + user messages for one question."""
    return [
        ChatMessage(role="system", content=f"{system_prompt}\n\n{format_evidence(results)}"),
        ChatMessage(role="user", content=f"Question: {question}"),
    ]
