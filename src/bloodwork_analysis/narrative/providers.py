# ============================================================================
# src/bloodwork_analysis/narrative/providers.py
# ============================================================================
"""
Narrative Providers

Wire formats for the hosted LLM APIs the narrative generator can talk to.
The set is closed and chosen once from settings:
- gemini: Google Generative Language API (generateContent)
- openai: OpenAI Chat Completions with JSON response format

A provider only builds requests and reads responses; transport lives in
llm_generator.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from ..config.narrative_config import NarrativeSettings, narrative_settings
from ..utils.exceptions import NarrativeGenerationError


class ProviderType(Enum):
    GEMINI = "gemini"
    OPENAI = "openai"


class NarrativeProvider(ABC):
    def __init__(self, settings: NarrativeSettings = narrative_settings):
        self.settings = settings

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        pass

    @abstractmethod
    def endpoint(self) -> str:
        pass

    @abstractmethod
    def headers(self) -> Dict[str, str]:
        pass

    @abstractmethod
    def format_request(self, prompt: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def parse_response(self, body: Dict[str, Any]) -> str:
        """
        Pull the generated text out of a response body.

        Raises:
            NarrativeGenerationError: body has no generated text
        """
        pass

    def require_text(self, text: Any) -> str:
        """Generated text must be a string; null or structured content is a failure."""
        if not isinstance(text, str):
            raise NarrativeGenerationError(
                f"{self.provider_type.value} response content is {type(text).__name__}, not text",
                provider=self.provider_type.value,
            )
        return text


class GeminiProvider(NarrativeProvider):
    provider_type = ProviderType.GEMINI

    @property
    def model_name(self) -> str:
        return self.settings.GEMINI_MODEL

    def endpoint(self) -> str:
        base = self.settings.GEMINI_BASE_URL.rstrip("/")
        return f"{base}/models/{self.model_name}:generateContent?key={self.settings.GEMINI_API_KEY}"

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def format_request(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {"parts": [{"text": prompt + "\n\nRespond ONLY with valid JSON. No markdown formatting."}]}
            ],
            "generationConfig": {
                "temperature": self.settings.NARRATIVE_TEMPERATURE,
                "maxOutputTokens": self.settings.NARRATIVE_MAX_TOKENS,
            },
        }

    def parse_response(self, body: Dict[str, Any]) -> str:
        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise NarrativeGenerationError(
                f"Gemini response has no generated text: {e}", provider=self.provider_type.value
            ) from e
        return self.require_text(text)


class OpenAIProvider(NarrativeProvider):
    provider_type = ProviderType.OPENAI

    @property
    def model_name(self) -> str:
        return self.settings.OPENAI_MODEL

    def endpoint(self) -> str:
        return f"{self.settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.OPENAI_API_KEY}",
        }

    def format_request(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": prompt},
                {"role": "user", "content": "Analyze these blood test results and respond in JSON format."},
            ],
            "temperature": self.settings.NARRATIVE_TEMPERATURE,
            "max_tokens": self.settings.NARRATIVE_MAX_TOKENS,
            "response_format": {"type": "json_object"},
        }

    def parse_response(self, body: Dict[str, Any]) -> str:
        try:
            text = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise NarrativeGenerationError(
                f"OpenAI response has no generated text: {e}", provider=self.provider_type.value
            ) from e
        return self.require_text(text)


def select_provider(settings: NarrativeSettings = narrative_settings) -> Optional[NarrativeProvider]:
    """
    First provider with an API key, Gemini preferred.

    Returns:
        Provider instance, or None when no key is configured
    """
    if settings.GEMINI_API_KEY:
        return GeminiProvider(settings)
    if settings.OPENAI_API_KEY:
        return OpenAIProvider(settings)
    return None
