"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`.
The system prompt is a top-level parameter of the Messages API, and
responses are lists of content blocks; text blocks are joined.
"""

from __future__ import annotations

import base64
from typing import Any

import anthropic
import structlog

from ragingest.config.settings import Settings
from ragingest.interfaces.llm_provider import ILLMProvider
from ragingest.models.llm import decode_message_payload
from ragingest.providers.llm.openai_provider import resolve_media_type
from ragingest.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "claude-sonnet-4-20250514"
_VISION_MAX_TOKENS = 4000

# Image formats the Messages API accepts; anything else is re-sniffed.
_ACCEPTED_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})


def _image_block(image_bytes: bytes, mime_type: str) -> dict[str, Any]:
    media_type = resolve_media_type(image_bytes, mime_type)
    if media_type not in _ACCEPTED_IMAGE_TYPES:
        media_type = resolve_media_type(image_bytes, None)
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": base64.b64encode(image_bytes).decode("utf-8"),
        },
    }


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.anthropic_api_key
        self._timeout = settings.llm_timeout_seconds
        self._client = anthropic.AsyncAnthropic(
            api_key=self._api_key,
            timeout=self._timeout,
            max_retries=settings.llm_max_retries,
        )
        self._model = settings.anthropic_model or _DEFAULT_MODEL

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        return await self._send(
            "completion",
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=max_tokens,
            system=system_prompt,
            temperature=temperature,
        )

    async def vision_extract(self, image_bytes: bytes, prompt: str, mime_type: str) -> str:
        """OCR an image; the image block goes before the instruction."""
        content = [_image_block(image_bytes, mime_type), {"type": "text", "text": prompt}]
        return await self._send(
            "vision",
            messages=[{"role": "user", "content": content}],
            max_tokens=_VISION_MAX_TOKENS,
        )

    async def _send(self, kind: str, messages: list[dict], max_tokens: int, **extra: Any) -> str:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=messages,
                **extra,
            )
        except anthropic.APITimeoutError as exc:
            raise LLMError(
                message=f"Anthropic {kind} timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic {kind} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [
            block for block in getattr(response, "content", None) or []
            if getattr(block, "type", None) == "text"
        ]
        text = decode_message_payload(text_blocks).text if text_blocks else ""
        if not text:
            raise LLMError(
                message=f"Anthropic {kind} returned no text content",
                provider_name=self.get_provider_name(),
            )

        usage = getattr(response, "usage", None)
        logger.info(
            f"anthropic_{kind}",
            model=self._model,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
        return text

    def supports_vision(self) -> bool:
        return True

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "anthropic"
