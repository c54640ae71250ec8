"""HuggingFace Inference API text generation.

Secondary answer generator. It tries a preferred model first and a second
model when the first one fails, before giving up with an LLMError.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import requests

from grounded_rag.application.ports.llm_port import build_prompt
from grounded_rag.domain.errors import LLMError

logger = logging.getLogger(__name__)

DEFAULT_INFERENCE_URL = "https://api-inference.huggingface.co/models"


@dataclass(frozen=True)
class HFModelProfile:
    model: str
    max_new_tokens: int
    temperature: float


DEFAULT_PROFILES = (
    HFModelProfile("microsoft/DialoGPT-small", max_new_tokens=150, temperature=0.8),
    HFModelProfile("gpt2", max_new_tokens=100, temperature=0.9),
)


@dataclass
class HuggingFaceInferenceAdapter:
    api_key: str
    base_url: str = DEFAULT_INFERENCE_URL
    profiles: Sequence[HFModelProfile] = field(default_factory=lambda: DEFAULT_PROFILES)
    timeout_s: float = 30.0

    @property
    def name(self) -> str:
        return "huggingface:" + "|".join(p.model for p in self.profiles)

    def generate(self, query: str, context: str, intent: str) -> str:
        if not self.api_key:
            raise LLMError("HuggingFace API key is not configured")
        prompt = build_prompt(query, context, intent)
        for profile in self.profiles:
            try:
                return self._call(profile, prompt)
            except (requests.RequestException, LLMError, ValueError) as ex:
                logger.warning("HuggingFace model %s failed: %s", profile.model, ex)
        raise LLMError("All HuggingFace models failed")

    def _call(self, profile: HFModelProfile, prompt: str) -> str:
        response = requests.post(
            f"{self.base_url.rstrip('/')}/{profile.model}",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "inputs": prompt,
                "parameters": {
                    "max_new_tokens": profile.max_new_tokens,
                    "temperature": profile.temperature,
                    "do_sample": True,
                    "return_full_text": False,
                },
            },
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        return _parse_generated_text(response.json())


def _parse_generated_text(payload: Any) -> str:
    if isinstance(payload, list) and payload:
        payload = payload[0]
    if isinstance(payload, dict):
        if "error" in payload:
            raise LLMError(str(payload["error"]))
        text = payload.get("generated_text")
        if isinstance(text, str) and text.strip():
            return text.strip()
    raise LLMError("no generated_text in response")
