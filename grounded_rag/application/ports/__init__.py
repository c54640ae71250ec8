"""Application ports package.

Re-exports the ports the use cases depend on.
"""

from grounded_rag.application.ports.clock_port import ClockPort
from grounded_rag.application.ports.embedding_port import TextEmbedder
from grounded_rag.application.ports.llm_port import (
    AnswerGenerator,
    ChatMessage,
    LLMPort,
    LLMResponse,
)
from grounded_rag.application.ports.telemetry_port import NoopTelemetry, TelemetryPort
from grounded_rag.application.ports.vector_store_port import VectorIndexPort

__all__ = [
    "AnswerGenerator",
    "ChatMessage",
    "ClockPort",
    "LLMPort",
    "LLMResponse",
    "NoopTelemetry",
    "TelemetryPort",
    "TextEmbedder",
    "VectorIndexPort",
]
