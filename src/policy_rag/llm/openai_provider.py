"""OpenAI LLM provider — Chat Completions with a forced function call.

Reads ``OPENAI_API_KEY`` from the environment unless a key is passed in.
"""

from __future__ import annotations

import logging
from typing import Any

from policy_rag.errors import GenerationFailed
from policy_rag.llm.base import ChatMessage, Completion, LLMProvider, ToolCall, ToolSpec

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


class OpenAILLMProvider(LLMProvider):
    """Generate structured answers via the OpenAI Chat API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.2,
        client: Any | None = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        if client is None:
            import openai

            kwargs: dict[str, Any] = {}
            if api_key:
                kwargs["api_key"] = api_key
            if base_url:
                kwargs["base_url"] = base_url
            client = openai.OpenAI(**kwargs)
        self._client: Any = client

    def complete(
        self,
        messages: list[ChatMessage],
        tool: ToolSpec,
        model: str | None = None,
    ) -> Completion:
        import openai

        model = model or self.model
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[{"role": m.role, "content": m.content} for m in messages],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                tools=[{
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters,
                    },
                }],
                tool_choice={"type": "function", "function": {"name": tool.name}},
            )
        except openai.OpenAIError as exc:
            raise GenerationFailed(f"OpenAI completion failed: {exc}") from exc

        message = response.choices[0].message
        calls = [
            ToolCall(name=tc.function.name, arguments=tc.function.arguments)
            for tc in (message.tool_calls or [])
        ]
        return Completion(model=model, tool_calls=calls, text=message.content or "")
