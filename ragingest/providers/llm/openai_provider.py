"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
Used for document enrichment (text completion) and image OCR (vision).
When ``openai_base_url`` is configured (TogetherAI, vLLM, Fireworks, ...)
the client points at that URL instead of the default OpenAI endpoint.
"""

from __future__ import annotations

import base64

import openai
import structlog

from ragingest.config.settings import Settings
from ragingest.interfaces.llm_provider import ILLMProvider
from ragingest.models.llm import decode_message_payload
from ragingest.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_VISION_MAX_TOKENS = 4000


def resolve_media_type(image_bytes: bytes, declared: str | None) -> str:
    """Return the MIME type to put in an image data URI.

    A declared ``image/*`` type wins.  Otherwise the type is sniffed from
    magic bytes (PNG, WEBP, GIF, JPEG), falling back to ``image/jpeg``.
    """
    if declared and declared.lower().startswith("image/"):
        return declared.lower()
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "image/jpeg"


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible API.

    Uses ``gpt-4o-mini`` for both text and vision by default; either model
    can be overridden via settings.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._timeout = settings.llm_timeout_seconds

        client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(self._timeout, connect=5.0),
            "max_retries": settings.llm_max_retries,
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        # The SDK refuses an empty key, so an unconfigured provider has no client.
        self._client = openai.AsyncOpenAI(**client_kwargs) if self._api_key else None
        self._text_model = settings.openai_text_model or "gpt-4o-mini"
        self._vision_model = settings.openai_vision_model or "gpt-4o-mini"
        # Custom endpoints may not serve a vision model unless one is named.
        self._has_vision = bool(settings.openai_vision_model) or not settings.openai_base_url
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a text completion via the chat completions API."""
        return await self._chat(
            "completion",
            model=self._text_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def vision_extract(self, image_bytes: bytes, prompt: str, mime_type: str) -> str:
        """Run OCR / description over an image with the vision model."""
        if not self._has_vision:
            raise LLMError(
                message="Vision not supported by this provider configuration",
                provider_name=self.get_provider_name(),
            )
        media_type = resolve_media_type(image_bytes, mime_type)
        data_uri = f"data:{media_type};base64,{base64.b64encode(image_bytes).decode('utf-8')}"
        return await self._chat(
            "vision",
            model=self._vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_uri}},
                    ],
                }
            ],
            max_tokens=_VISION_MAX_TOKENS,
        )

    async def _chat(self, kind: str, model: str, messages: list[dict], **params: object) -> str:
        """Send one chat request and return its text, wrapping SDK failures in LLMError."""
        if self._client is None:
            raise LLMError(
                message=f"{self._provider_label} {kind} failed: no API key configured",
                provider_name=self.get_provider_name(),
            )
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                **params,
            )
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} {kind} timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} {kind} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        choices = getattr(response, "choices", None)
        text = decode_message_payload(choices[0].message.content).text if choices else ""
        if not text:
            raise LLMError(
                message=f"{self._provider_label} {kind} returned empty response",
                provider_name=self.get_provider_name(),
            )

        usage = getattr(response, "usage", None)
        logger.info(
            f"llm_{kind}",
            provider=self._provider_label,
            model=model,
            tokens=getattr(usage, "total_tokens", None),
        )
        return text

    def supports_vision(self) -> bool:
        return self._has_vision

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return self._provider_label
