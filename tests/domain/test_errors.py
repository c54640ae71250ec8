"""Tests for the domain error hierarchy."""

import pytest

from grounded_rag.domain.errors import (
    DomainError,
    EmbeddingError,
    LLMError,
    ProviderTimeoutError,
    ValidationError,
)


@pytest.mark.parametrize("cls", [ValidationError, EmbeddingError, LLMError])
def test_errors_are_domain_errors(cls):
    err = cls("boom")
    assert isinstance(err, DomainError)
    assert str(err) == "boom"


def test_provider_timeout_error_carries_provider_and_timeout():
    err = ProviderTimeoutError("openai:gpt-3.5-turbo", 2.5)
    assert isinstance(err, DomainError)
    assert err.provider == "openai:gpt-3.5-turbo"
    assert err.timeout_s == 2.5
    assert "timed out after 2.5s" in str(err)


def test_provider_timeout_error_can_be_chained():
    with pytest.raises(ProviderTimeoutError) as info:
        try:
            raise TimeoutError
        except TimeoutError as ex:
            raise ProviderTimeoutError("hf", 1.0) from ex
    assert isinstance(info.value.__cause__, TimeoutError)


def test_error_family_is_closed():
    assert set(DomainError.__subclasses__()) == {
        ValidationError,
        EmbeddingError,
        LLMError,
        ProviderTimeoutError,
    }
