from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass(frozen=True)
class LLMResponse:
    text: str
    finish_reason: str = "stop"
    usage_tokens: int | None = None


class LLMPort(Protocol):
    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.2, max_tokens: int = 512
    ) -> LLMResponse: ...


@runtime_checkable
class AnswerGenerator(Protocol):
    """One answer-generation strategy of the fallback chain."""

    name: str

    def generate(self, query: str, context: str, intent: str) -> str:
        """Answer ``query`` from ``context``.

        Raises:
            LLMError: provider unavailable or failed (the chain moves on)
        """
        ...


def build_prompt(query: str, context: str, intent: str) -> str:
    return (
        f"Question: {query}\n"
        f"Intent: {intent}\n"
        f"Context: {context}\n\n"
        "Please provide a clear and accurate answer based on the context provided. "
        "If the context doesn't contain enough information to answer the question, "
        "please say so."
    )
