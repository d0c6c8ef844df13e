"""Binary-file text extractors and MIME-type dispatch.

Dispatch is a coarse substring match on the lower-cased MIME type, checked
in order:

* ``"pdf"`` -> :class:`PDFExtractor`
* ``"image"`` -> :class:`ImageExtractor`
* ``"word"`` / ``"document"`` / ``"presentation"`` / ``"spreadsheet"``
  -> :class:`DocumentExtractor`

Anything else has no extractor; callers skip it with a warning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ragingest.services.ingestion.extractors.base import BaseExtractor
from ragingest.services.ingestion.extractors.document_extractor import DocumentExtractor
from ragingest.services.ingestion.extractors.image_extractor import OCR_PROMPT, ImageExtractor
from ragingest.services.ingestion.extractors.pdf_extractor import PDFExtractor

if TYPE_CHECKING:
    from ragingest.interfaces.llm_provider import ILLMProvider

_DOCUMENT_MARKERS = ("word", "document", "presentation", "spreadsheet")


def extractor_kind_for(mime_type: str | None) -> str | None:
    """Return ``"pdf"``, ``"image"``, ``"document"`` or ``None`` for *mime_type*."""
    mime = (mime_type or "").lower()
    if "pdf" in mime:
        return "pdf"
    if "image" in mime:
        return "image"
    if any(marker in mime for marker in _DOCUMENT_MARKERS):
        return "document"
    return None


def build_extractors(llm: ILLMProvider | None, vision_timeout: float = 60.0) -> dict[str, BaseExtractor]:
    """Return one extractor per kind, keyed by :attr:`BaseExtractor.kind`."""
    extractors: list[BaseExtractor] = [
        PDFExtractor(),
        ImageExtractor(llm, timeout=vision_timeout),
        DocumentExtractor(),
    ]
    return {e.kind: e for e in extractors}


def select_extractor(
    mime_type: str | None,
    extractors: dict[str, BaseExtractor],
) -> BaseExtractor | None:
    """Return the extractor for *mime_type*, or ``None`` when unsupported."""
    kind = extractor_kind_for(mime_type)
    return extractors.get(kind) if kind else None


__all__ = [
    "OCR_PROMPT",
    "BaseExtractor",
    "DocumentExtractor",
    "ImageExtractor",
    "PDFExtractor",
    "build_extractors",
    "extractor_kind_for",
    "select_extractor",
]
