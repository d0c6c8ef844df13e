"""Common contract for binary-file text extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragingest.models.ingest import ExtractionResult


class BaseExtractor(ABC):
    """Turns the bytes of one stored binary file into plain text.

    ``kind`` doubles as the ``blobType`` written with the indexed object.
    """

    kind: str = ""

    @abstractmethod
    async def extract(self, data: bytes, mime_type: str, file_name: str) -> ExtractionResult:
        """Return the text extracted from *data*.

        Raises
        ------
        ragingest.utils.errors.ExtractionError
            If no text could be produced.  Extractors that always produce
            something report best-effort output via ``degraded`` instead.
        """
