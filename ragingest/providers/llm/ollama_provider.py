"""Ollama LLM provider adapter.

Ollama serves an OpenAI-compatible chat API under ``/v1``, so this adapter
is the OpenAI adapter pointed at the local server with local model names
(``llama3.1`` for enrichment, ``llava`` for image OCR).  Only availability
differs: there is no key, so a configured base URL is enough.
"""

from __future__ import annotations

import openai

from ragingest.config.settings import Settings
from ragingest.providers.llm.openai_provider import OpenAILLMProvider

_TEXT_MODEL = "llama3.1"
_VISION_MODEL = "llava"


class OllamaLLMProvider(OpenAILLMProvider):
    """LLM provider backed by a local Ollama server (``OLLAMA_BASE_URL``)."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.ollama_base_url.rstrip("/")
        # The SDK refuses an empty key; Ollama ignores whatever is sent.
        self._api_key = "ollama"
        self._timeout = settings.llm_timeout_seconds
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key=self._api_key,
            timeout=openai.Timeout(self._timeout, connect=5.0),
            max_retries=settings.llm_max_retries,
        )
        self._text_model = _TEXT_MODEL
        self._vision_model = _VISION_MODEL
        self._has_vision = True
        self._provider_label = "ollama"

    def is_available(self) -> bool:
        return bool(self._base_url)
