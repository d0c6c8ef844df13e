"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used for metadata
enrichment (text completion) and image OCR (vision).  Implementations wrap
OpenAI, Anthropic, or a local Ollama server; call sites never import an SDK.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider, OllamaLLMProvider
# Located in: ragingest/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used by the ingestion pipelines."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the actual request or data.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.  Callers must not assume it is valid
            JSON even when JSON was requested.

        Raises
        ------
        ragingest.utils.errors.LLMError
            If the API call fails or the response carries no content.
        """

    @abstractmethod
    async def vision_extract(self, image_bytes: bytes, prompt: str, mime_type: str) -> str:
        """Analyse an image using the model's vision capability.

        Parameters
        ----------
        image_bytes:
            Raw bytes of the image.
        prompt:
            Instruction describing what to extract from the image.
        mime_type:
            Declared MIME type of the image, used for the data URI.

        Returns
        -------
        str
            The model's text response, verbatim.

        Raises
        ------
        ragingest.utils.errors.LLMError
            If the provider lacks vision, the call fails, or the response is
            malformed.
        """

    @abstractmethod
    def supports_vision(self) -> bool:
        """Return ``True`` if this provider can process image inputs."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials / endpoint are configured.

        Does not contact the remote service.
        """
