"""Image OCR through a vision-capable LLM.

The image is sent with its declared MIME type and a fixed instruction:
transcribe any text, otherwise describe the picture.  The model's reply is
returned verbatim.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ragingest.models.ingest import ExtractionResult
from ragingest.services.ingestion.extractors.base import BaseExtractor
from ragingest.utils.errors import ExtractionError, LLMError

if TYPE_CHECKING:
    from ragingest.interfaces.llm_provider import ILLMProvider

logger = structlog.get_logger(logger_name=__name__)

OCR_PROMPT = (
    "Extract all text from this image using OCR. If there is no text, describe "
    "what you see in the image. Return only the extracted text or description."
)

_DEFAULT_TIMEOUT = 60.0


class ImageExtractor(BaseExtractor):
    """OCR / description of an image via :meth:`ILLMProvider.vision_extract`."""

    kind = "image"

    def __init__(self, llm: ILLMProvider | None, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._llm = llm
        self._timeout = timeout

    async def extract(self, data: bytes, mime_type: str, file_name: str) -> ExtractionResult:
        if self._llm is None or not self._llm.supports_vision():
            raise ExtractionError(
                message=f"No vision-capable LLM configured for image {file_name}",
            )

        provider = self._llm.get_provider_name()
        try:
            text = await asyncio.wait_for(
                self._llm.vision_extract(data, OCR_PROMPT, mime_type),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionError(
                message=f"Vision OCR of {file_name} timed out after {self._timeout:g}s",
                provider_name=provider,
            ) from exc
        except LLMError as exc:
            raise ExtractionError(
                message=f"Failed to extract text from image {file_name}: {exc.message}",
                provider_name=provider,
            ) from exc

        logger.info(
            "image_text_extracted",
            file_name=file_name,
            provider=provider,
            characters=len(text),
        )
        return ExtractionResult(text=text, extractor=self.kind)
