from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PassageInput:
    """One pre-chunked passage handed over by the document-processing collaborator."""

    content: str
    type: str = "text"
    metadata: Mapping[str, Any] = field(default_factory=dict)
    embedding: Sequence[float] | None = None  # computed on insertion when missing
    embedding_model: str | None = None


@dataclass(frozen=True)
class IngestDocumentRequest:
    document_id: str
    passages: Sequence[PassageInput]
    metadata: Mapping[str, Any] = field(default_factory=dict)
