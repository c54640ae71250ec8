from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from grounded_rag.domain.errors import EmbeddingError


@dataclass
class HFEmbeddingAdapter:
    """Secondary semantic embedder: local HuggingFace Sentence-Transformers model."""

    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"  # switch to "cuda" when available
    local_files_only: bool = False  # support offline deployments
    _model: Any | None = None

    @property
    def name(self) -> str:
        return f"sentence-transformers:{self.model_name}"

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        try:
            module = import_module("sentence_transformers")
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError("sentence-transformers not installed.") from ex
        try:
            self._model = module.SentenceTransformer(
                self.model_name,
                device=self.device,
                local_files_only=self.local_files_only,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(
                f"Failed to load embedding model '{self.model_name}': {ex}"
            ) from ex
        return self._model

    def embed(self, text: str) -> list[float]:
        model = self._ensure_model()
        try:
            raw_vector = model.encode(
                text,
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding text failed: {ex}") from ex
        if hasattr(raw_vector, "tolist"):
            raw_vector = raw_vector.tolist()
        vector = cast(Sequence[float], raw_vector)
        return [float(x) for x in vector]
