"""Heuristic PDF text extraction.

This is deliberately not a structural PDF parser.  Bytes outside printable
ASCII (plus LF and CR) become spaces, then every run of ten or more
alphanumeric / punctuation / whitespace characters on each line is kept as
"readable text".  Uncompressed text streams come through; compressed
streams and scanned pages yield little or nothing.
"""

from __future__ import annotations

import re

import structlog

from ragingest.models.ingest import ExtractionResult
from ragingest.services.ingestion.extractors.base import BaseExtractor
from ragingest.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_READABLE_RUN_RE = re.compile(r"""[a-zA-Z0-9\s.,!?;:'"()-]{10,}""")
_PRINTABLE = frozenset(range(32, 127)) | {10, 13}


def printable_text(data: bytes) -> str:
    """Map every byte outside printable ASCII, LF and CR to a space."""
    return "".join(chr(b) if b in _PRINTABLE else " " for b in data)


class PDFExtractor(BaseExtractor):
    """Pulls readable character runs out of raw PDF bytes."""

    kind = "pdf"

    async def extract(self, data: bytes, mime_type: str, file_name: str) -> ExtractionResult:
        runs: list[str] = []
        for line in printable_text(data).split("\n"):
            runs.extend(_READABLE_RUN_RE.findall(line))

        text = " ".join(runs).strip()
        if not text:
            raise ExtractionError(
                message=f"Could not extract sufficient text from PDF {file_name}",
            )

        logger.info("pdf_text_extracted", file_name=file_name, characters=len(text), runs=len(runs))
        return ExtractionResult(text=text, extractor=self.kind)
