"""Ollama LLM provider — local-first, no API keys.

Uses ``/api/chat`` with a single tool. Ollama cannot force a tool call, so a
model that answers in free text yields a completion without tool calls.
"""

from __future__ import annotations

import json
import logging

import httpx

from policy_rag.errors import GenerationFailed
from policy_rag.llm.base import ChatMessage, Completion, LLMProvider, ToolCall, ToolSpec

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama3.1:8b"
DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaLLMProvider(LLMProvider):
    """Generate structured answers via a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        timeout: float = 120.0,
        client: httpx.Client | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def complete(
        self,
        messages: list[ChatMessage],
        tool: ToolSpec,
        model: str | None = None,
    ) -> Completion:
        model = model or self.model
        payload = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "tools": [{
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }],
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

        try:
            resp = self._client.post("/api/chat", json=payload)
            resp.raise_for_status()
            message = resp.json().get("message", {})
        except (httpx.HTTPError, ValueError) as exc:
            raise GenerationFailed(f"Ollama completion failed: {exc}") from exc

        calls = []
        for tc in message.get("tool_calls") or []:
            fn = tc.get("function", {})
            arguments = fn.get("arguments", {})
            if not isinstance(arguments, str):
                arguments = json.dumps(arguments)
            calls.append(ToolCall(name=fn.get("name", ""), arguments=arguments))

        return Completion(model=model, tool_calls=calls, text=message.get("content") or "")
