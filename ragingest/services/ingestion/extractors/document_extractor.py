"""Best-effort text from office documents and other binaries.

Decodes the bytes as UTF-8 with invalid sequences replaced, blanks every
character outside printable ASCII and newline, and keeps the result when it
is longer than 100 characters.  Otherwise a placeholder naming the file is
returned.  This extractor never fails; placeholder output is flagged
``degraded``.
"""

from __future__ import annotations

import re

import structlog

from ragingest.models.ingest import ExtractionResult
from ragingest.services.ingestion.extractors.base import BaseExtractor

logger = structlog.get_logger(logger_name=__name__)

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n]")
_MIN_USEFUL_CHARS = 100


def placeholder_text(file_name: str) -> str:
    return f"Document: {file_name} (Basic text extraction - may not capture all content)"


class DocumentExtractor(BaseExtractor):
    """Decode-and-filter extraction for Word, presentation and spreadsheet files."""

    kind = "document"

    async def extract(self, data: bytes, mime_type: str, file_name: str) -> ExtractionResult:
        decoded = data.decode("utf-8", errors="replace")
        text = _NON_PRINTABLE_RE.sub(" ", decoded).strip()

        if len(text) > _MIN_USEFUL_CHARS:
            logger.info("document_text_extracted", file_name=file_name, characters=len(text))
            return ExtractionResult(text=text, extractor=self.kind)

        logger.warning(
            "document_extraction_placeholder",
            file_name=file_name,
            mime_type=mime_type,
            characters=len(text),
        )
        return ExtractionResult(text=placeholder_text(file_name), extractor=self.kind, degraded=True)
