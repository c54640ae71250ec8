from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from grounded_rag.application.ports.llm_port import (
    ChatMessage,
    LLMPort,
    LLMResponse,
    build_prompt,
)
from grounded_rag.domain.errors import LLMError

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided context. "
    "Provide accurate, concise answers with proper source attribution."
)


@dataclass
class OpenAIChatAdapter(LLMPort):
    """Primary answer generator: any OpenAI-compatible chat completion endpoint."""

    api_key: str
    base_url: str | None = None  # e.g. "http://localhost:8000/v1" for vLLM
    model: str = "gpt-3.5-turbo"
    timeout_s: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 500

    def __post_init__(self) -> None:
        # Defer import of OpenAI to chat() to avoid hard dependency in tests
        self._client: Any | None = None

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.2, max_tokens: int = 512
    ) -> LLMResponse:
        try:
            if self._client is None:
                if not self.api_key:
                    raise LLMError("OpenAI API key is not configured")
                module = import_module("openai")
                OpenAI = module.OpenAI
                self._client = OpenAI(
                    base_url=self.base_url,
                    api_key=self.api_key,
                    timeout=self.timeout_s,
                    max_retries=0,
                )
            assert self._client is not None
            payload: Any = [m.__dict__ for m in messages]
            resp: Any = self._client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=temperature,
                max_tokens=max_tokens,
            )
            choice = resp.choices[0]
            return LLMResponse(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason,
            )
        except LLMError:
            raise
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise LLMError(f"LLM communication failed: {ex}") from ex

    def generate(self, query: str, context: str, intent: str) -> str:
        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=build_prompt(query, context, intent)),
        ]
        return self.chat(messages, temperature=self.temperature, max_tokens=self.max_tokens).text
