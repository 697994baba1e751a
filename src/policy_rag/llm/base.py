"""Abstract base class and wire types for generation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ChatMessage:
    """One message in a generation request."""

    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass(frozen=True)
class ToolSpec:
    """A function the model is forced to call, described by a JSON schema."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass(frozen=True)
class ToolCall:
    """A function invocation returned by the model, arguments as raw JSON text."""

    name: str
    arguments: str


@dataclass
class Completion:
    """Provider-neutral generation response."""

    model: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    text: str = ""


class LLMProvider(ABC):
    """Interface for schema-constrained response generation."""

    model: str = ""

    @abstractmethod
    def complete(
        self,
        messages: list[ChatMessage],
        tool: ToolSpec,
        model: str | None = None,
    ) -> Completion:
        """Generate a response that must call ``tool`` exactly once.

        Args:
            messages: System and user messages, in order.
            tool: The only function the model may call.
            model: Model identifier; the provider default when omitted.

        Returns:
            A ``Completion`` with any tool calls the model made.

        Raises:
            GenerationFailed: The provider request failed.
        """

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__
