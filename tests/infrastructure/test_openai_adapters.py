"""OpenAI-compatible adapters against a fake ``openai`` module."""

import sys
from types import SimpleNamespace

import pytest

from grounded_rag.domain.errors import EmbeddingError, LLMError
from grounded_rag.infrastructure.embeddings.openai_embedding_adapter import (
    OpenAIEmbeddingAdapter,
)
from grounded_rag.infrastructure.llm.openai_chat_adapter import SYSTEM_PROMPT, OpenAIChatAdapter


class _FakeEmbeddings:
    def __init__(self, owner):
        self.owner = owner

    def create(self, model, input):  # noqa: A002
        self.owner.calls.append(("embeddings", model, input))
        if self.owner.fail:
            raise RuntimeError("rate limited")
        return SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])])


class _FakeCompletions:
    def __init__(self, owner):
        self.owner = owner

    def create(self, model, messages, temperature, max_tokens):
        self.owner.calls.append(("chat", model, messages, temperature, max_tokens))
        if self.owner.fail:
            raise RuntimeError("server error")
        message = SimpleNamespace(content="Revenue was 42 million.")
        return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason="stop")])


class _FakeOpenAI:
    instances: list = []
    fail = False

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.calls: list = []
        self.embeddings = _FakeEmbeddings(self)
        self.chat = SimpleNamespace(completions=_FakeCompletions(self))
        _FakeOpenAI.instances.append(self)


@pytest.fixture
def fake_openai(monkeypatch):
    module = type(sys)("openai")
    module.OpenAI = _FakeOpenAI
    _FakeOpenAI.instances = []
    _FakeOpenAI.fail = False
    monkeypatch.setitem(sys.modules, "openai", module)
    return _FakeOpenAI


class TestOpenAIEmbeddingAdapter:
    def test_embed_returns_vector(self, fake_openai) -> None:
        adapter = OpenAIEmbeddingAdapter(api_key="sk-test", timeout_s=3.0)

        assert adapter.embed("hello") == [0.1, 0.2, 0.3]
        assert adapter.name == "openai:text-embedding-ada-002"
        client = fake_openai.instances[0]
        assert client.kwargs == {
            "base_url": None,
            "api_key": "sk-test",
            "timeout": 3.0,
            "max_retries": 0,
        }
        assert client.calls == [("embeddings", "text-embedding-ada-002", "hello")]

    def test_client_is_reused(self, fake_openai) -> None:
        adapter = OpenAIEmbeddingAdapter(api_key="sk-test")
        adapter.embed("a")
        adapter.embed("b")
        assert len(fake_openai.instances) == 1

    def test_missing_key_is_embedding_error(self, fake_openai) -> None:
        with pytest.raises(EmbeddingError, match="not configured"):
            OpenAIEmbeddingAdapter(api_key="").embed("x")
        assert fake_openai.instances == []

    def test_provider_failure_is_embedding_error(self, fake_openai) -> None:
        fake_openai.fail = True
        with pytest.raises(EmbeddingError, match="rate limited"):
            OpenAIEmbeddingAdapter(api_key="sk-test").embed("x")


class TestOpenAIChatAdapter:
    def test_generate_sends_system_and_user_prompt(self, fake_openai) -> None:
        adapter = OpenAIChatAdapter(api_key="sk-test", base_url="http://localhost:8000/v1")

        text = adapter.generate("What was the revenue?", "Revenue was 42.", "factual")

        assert text == "Revenue was 42 million."
        _, model, messages, temperature, max_tokens = fake_openai.instances[0].calls[0]
        assert model == "gpt-3.5-turbo"
        assert temperature == 0.7
        assert max_tokens == 500
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert messages[1]["role"] == "user"
        assert messages[1]["content"].startswith("Question: What was the revenue?")
        assert fake_openai.instances[0].kwargs["base_url"] == "http://localhost:8000/v1"

    def test_missing_key_is_llm_error(self, fake_openai) -> None:
        with pytest.raises(LLMError):
            OpenAIChatAdapter(api_key="").generate("q", "c", "factual")

    def test_provider_failure_is_llm_error(self, fake_openai) -> None:
        fake_openai.fail = True
        with pytest.raises(LLMError, match="server error"):
            OpenAIChatAdapter(api_key="sk-test").generate("q", "c", "factual")
