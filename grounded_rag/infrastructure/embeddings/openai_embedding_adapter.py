from dataclasses import dataclass
from importlib import import_module
from typing import Any

from grounded_rag.domain.errors import EmbeddingError


@dataclass
class OpenAIEmbeddingAdapter:
    """Primary semantic embedder: any OpenAI-compatible /embeddings endpoint."""

    api_key: str
    base_url: str | None = None  # None = api.openai.com
    model: str = "text-embedding-ada-002"
    timeout_s: float = 10.0

    def __post_init__(self) -> None:
        # Defer import of OpenAI to embed() to avoid hard dependency in tests
        self._client: Any | None = None

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    def _ensure_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise EmbeddingError("OpenAI API key is not configured")
            module = import_module("openai")
            self._client = module.OpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout_s,
                max_retries=0,
            )
        return self._client

    def embed(self, text: str) -> list[float]:
        try:
            client = self._ensure_client()
            resp: Any = client.embeddings.create(model=self.model, input=text or " ")
            return list(resp.data[0].embedding)
        except EmbeddingError:
            raise
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise EmbeddingError(f"OpenAI embedding failed: {ex}") from ex
