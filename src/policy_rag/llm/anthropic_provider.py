"""Anthropic Claude LLM provider.

Requires the ``anthropic`` extra and ``ANTHROPIC_API_KEY`` env var.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from policy_rag.errors import GenerationFailed
from policy_rag.llm.base import ChatMessage, Completion, LLMProvider, ToolCall, ToolSpec

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicLLMProvider(LLMProvider):
    """Generate structured answers via the Anthropic Messages API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.2,
    ):
        try:
            import anthropic
        except ImportError as exc:
            raise ImportError(
                "anthropic package required: pip install policy-rag[anthropic]"
            ) from exc

        self._anthropic = anthropic
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client: Any = anthropic.Anthropic(api_key=api_key)

    def complete(
        self,
        messages: list[ChatMessage],
        tool: ToolSpec,
        model: str | None = None,
    ) -> Completion:
        model = model or self.model
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages if m.role != "system"
            ],
            "tools": [{
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.parameters,
            }],
            "tool_choice": {"type": "tool", "name": tool.name},
        }
        if system:
            kwargs["system"] = system

        try:
            response = self._client.messages.create(**kwargs)
        except self._anthropic.AnthropicError as exc:
            raise GenerationFailed(f"Anthropic completion failed: {exc}") from exc

        calls: list[ToolCall] = []
        texts: list[str] = []
        for block in response.content:
            if block.type == "tool_use":
                calls.append(ToolCall(name=block.name, arguments=json.dumps(block.input)))
            elif block.type == "text":
                texts.append(block.text)

        return Completion(model=model, tool_calls=calls, text="".join(texts))
