"""Tests for generation providers — forced tool calls, mock clients, no network."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from policy_rag.errors import GenerationFailed
from policy_rag.llm.base import ChatMessage, LLMProvider, ToolCall
from policy_rag.llm.factory import available_providers, get_llm_provider
from policy_rag.llm.ollama_provider import OllamaLLMProvider
from policy_rag.llm.openai_provider import OpenAILLMProvider
from policy_rag.pipeline.prompts import ANSWER_TOOL

MESSAGES = [
    ChatMessage(role="system", content="Answer from the evidence."),
    ChatMessage(role="user", content="Question: How much vacation can I carry over?"),
]

ARGS = json.dumps({"content": "Up to 384 hours.", "citations": []})


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


def _openai_completion(tool_calls=None, content=None):
    message = SimpleNamespace(tool_calls=tool_calls, content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestOpenAILLMProvider:
    def test_forces_the_answer_tool(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _openai_completion(tool_calls=[
            SimpleNamespace(function=SimpleNamespace(name="answer_question", arguments=ARGS)),
        ])
        provider = OpenAILLMProvider(client=client)

        completion = provider.complete(MESSAGES, ANSWER_TOOL)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["tool_choice"] == {
            "type": "function", "function": {"name": "answer_question"},
        }
        assert kwargs["tools"][0]["function"]["parameters"] == ANSWER_TOOL.parameters
        assert kwargs["messages"][0] == {"role": "system", "content": "Answer from the evidence."}
        assert completion.tool_calls == [ToolCall(name="answer_question", arguments=ARGS)]
        assert completion.model == "gpt-4o"

    def test_model_override(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _openai_completion(content="hi")
        provider = OpenAILLMProvider(client=client)

        completion = provider.complete(MESSAGES, ANSWER_TOOL, model="gpt-4o-mini")

        assert client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o-mini"
        assert completion.model == "gpt-4o-mini"
        assert completion.tool_calls == []
        assert completion.text == "hi"

    def test_api_error_maps_to_generation_failed(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.OpenAIError("rate limited")
        provider = OpenAILLMProvider(client=client)
        with pytest.raises(GenerationFailed):
            provider.complete(MESSAGES, ANSWER_TOOL)


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class TestAnthropicLLMProvider:
    @pytest.fixture
    def provider(self):
        pytest.importorskip("anthropic")
        from policy_rag.llm.anthropic_provider import AnthropicLLMProvider

        provider = AnthropicLLMProvider(api_key="test-key")
        provider._client = MagicMock()
        return provider

    def test_tool_use_block_becomes_tool_call(self, provider):
        provider._client.messages.create.return_value = SimpleNamespace(content=[
            SimpleNamespace(
                type="tool_use",
                name="answer_question",
                input={"content": "Up to 384 hours.", "citations": []},
            ),
        ])

        completion = provider.complete(MESSAGES, ANSWER_TOOL)

        kwargs = provider._client.messages.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "answer_question"}
        assert kwargs["system"] == "Answer from the evidence."
        assert all(m["role"] != "system" for m in kwargs["messages"])
        assert json.loads(completion.tool_calls[0].arguments)["content"] == "Up to 384 hours."

    def test_api_error_maps_to_generation_failed(self, provider):
        import anthropic

        provider._client.messages.create.side_effect = anthropic.AnthropicError("overloaded")
        with pytest.raises(GenerationFailed):
            provider.complete(MESSAGES, ANSWER_TOOL)


# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------


def _ollama_client(handler) -> httpx.Client:
    return httpx.Client(base_url="http://ollama.test", transport=httpx.MockTransport(handler))


class TestOllamaLLMProvider:
    def test_dict_arguments_serialised(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": {
                "content": "",
                "tool_calls": [{"function": {
                    "name": "answer_question",
                    "arguments": {"content": "Up to 384 hours.", "citations": []},
                }}],
            }})

        provider = OllamaLLMProvider(client=_ollama_client(handler))
        completion = provider.complete(MESSAGES, ANSWER_TOOL)

        assert seen["body"]["tools"][0]["function"]["name"] == "answer_question"
        assert seen["body"]["stream"] is False
        call = completion.tool_calls[0]
        assert call.name == "answer_question"
        assert json.loads(call.arguments)["content"] == "Up to 384 hours."

    def test_no_tool_calls(self):
        provider = OllamaLLMProvider(client=_ollama_client(
            lambda request: httpx.Response(200, json={"message": {"content": "free text"}}),
        ))
        completion = provider.complete(MESSAGES, ANSWER_TOOL)
        assert completion.tool_calls == []
        assert completion.text == "free text"

    def test_http_error_maps_to_generation_failed(self):
        provider = OllamaLLMProvider(client=_ollama_client(
            lambda request: httpx.Response(503, text="unavailable"),
        ))
        with pytest.raises(GenerationFailed):
            provider.complete(MESSAGES, ANSWER_TOOL)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestLLMFactory:
    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore[abstract]

    def test_available_providers(self):
        assert available_providers() == ["openai", "anthropic", "ollama"]

    def test_get_openai_with_client(self):
        provider = get_llm_provider("openai", client=MagicMock(), model="gpt-4o-mini")
        assert isinstance(provider, OpenAILLMProvider)
        assert provider.model == "gpt-4o-mini"

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            get_llm_provider("nonexistent")
