from typing import Protocol, runtime_checkable


@runtime_checkable
class TextEmbedder(Protocol):
    """One embedding strategy. ``name`` is recorded as passage provenance."""

    name: str

    def embed(self, text: str) -> list[float]: ...
