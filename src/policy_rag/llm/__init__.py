"""LLM providers — OpenAI, Anthropic, Ollama."""

from policy_rag.llm.base import ChatMessage, Completion, LLMProvider, ToolCall, ToolSpec
from policy_rag.llm.factory import available_providers, get_llm_provider

__all__ = [
    "ChatMessage",
    "Completion",
    "LLMProvider",
    "ToolCall",
    "ToolSpec",
    "available_providers",
    "get_llm_provider",
]
