"""Domain errors (typed).

Only ValidationError ever reaches a query caller; provider errors are
absorbed by the fallback chains and show up as degraded output instead.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input/domain state (empty query, duplicate document, ...)."""


class EmbeddingError(DomainError):
    """Embedding provider failed, is misconfigured or returned a malformed vector."""


class LLMError(DomainError):
    """Generation provider failed or is misconfigured."""


class ProviderTimeoutError(DomainError):
    """External provider did not answer within its configured timeout."""

    def __init__(self, provider: str, timeout_s: float) -> None:
        super().__init__(f"provider '{provider}' timed out after {timeout_s:.1f}s")
        self.provider = provider
        self.timeout_s = timeout_s
