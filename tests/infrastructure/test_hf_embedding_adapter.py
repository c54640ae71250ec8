import math
import sys

import pytest

from grounded_rag.domain.errors import EmbeddingError
from grounded_rag.infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter


class _FakeArray:
    """Minimal stand-in for a numpy array."""

    def __init__(self, data):
        self.data = data

    def tolist(self):
        return self.data


class _FakeST:
    init_kwargs: dict = {}

    def __init__(self, model_name, **kwargs):  # noqa: ANN001
        """Stand-in for sentence_transformers.SentenceTransformer."""
        _FakeST.init_kwargs = {"model_name": model_name, **kwargs}

    def encode(
        self,
        inputs,
        normalize_embeddings=True,
        convert_to_numpy=True,
        show_progress_bar=False,
    ):
        if inputs == "explode":
            raise RuntimeError("CUDA out of memory")
        vec = [1.0] * 8
        if normalize_embeddings:
            norm = math.sqrt(sum(x * x for x in vec))
            vec = [x / norm for x in vec]
        return _FakeArray(vec) if convert_to_numpy else vec


@pytest.fixture
def fake_st(monkeypatch):
    fake_module = type(sys)("sentence_transformers")
    fake_module.SentenceTransformer = _FakeST
    monkeypatch.setitem(sys.modules, "sentence_transformers", fake_module)
    return fake_module


def test_embed_is_normalized(fake_st):
    adapter = HFEmbeddingAdapter(device="cpu")

    vector = adapter.embed("Hallo Welt")

    assert len(vector) == 8
    assert all(isinstance(x, float) for x in vector)
    assert math.sqrt(sum(x * x for x in vector)) == pytest.approx(1.0)
    assert _FakeST.init_kwargs == {
        "model_name": "sentence-transformers/all-MiniLM-L6-v2",
        "device": "cpu",
        "local_files_only": False,
    }


def test_name_includes_model(fake_st):
    assert HFEmbeddingAdapter(model_name="m").name == "sentence-transformers:m"


def test_model_is_loaded_once(fake_st, monkeypatch):
    adapter = HFEmbeddingAdapter()
    adapter.embed("a")
    monkeypatch.setattr(fake_st, "SentenceTransformer", None)
    adapter.embed("b")


def test_encode_failure_is_embedding_error(fake_st):
    with pytest.raises(EmbeddingError):
        HFEmbeddingAdapter().embed("explode")


def test_missing_library_is_embedding_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "sentence_transformers", None)
    with pytest.raises(EmbeddingError, match="not installed"):
        HFEmbeddingAdapter().embed("x")


def test_model_load_failure_is_embedding_error(monkeypatch):
    def broken(*args, **kwargs):
        raise OSError("model not found")

    fake_module = type(sys)("sentence_transformers")
    fake_module.SentenceTransformer = broken
    monkeypatch.setitem(sys.modules, "sentence_transformers", fake_module)
    with pytest.raises(EmbeddingError, match="Failed to load"):
        HFEmbeddingAdapter(model_name="missing").embed("x")
