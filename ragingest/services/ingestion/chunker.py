"""Word-window text chunking.

Splits text on whitespace and emits overlapping windows of
``window_size`` words, advancing ``window_size - overlap`` words per step.
The last window may be shorter.  Consecutive chunks share ``overlap``
words so a phrase spanning a boundary survives intact in at least one of
them.

Chunking is deterministic: the same text and parameters always produce the
same ordered chunk list.
"""

from __future__ import annotations

import structlog

from ragingest.models.ingest import Chunk, TextBlock

logger = structlog.get_logger(logger_name=__name__)


class TextChunker:
    """Splits text into overlapping word windows.

    Parameters
    ----------
    window_size:
        Words per chunk (default 220).
    overlap:
        Words shared by neighbouring chunks (default 40).  Must be smaller
        than ``window_size``.

    Raises
    ------
    ValueError
        If ``window_size`` is not positive, ``overlap`` is negative, or
        ``overlap >= window_size``.
    """

    def __init__(self, window_size: int = 220, overlap: int = 40) -> None:
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        if overlap < 0:
            raise ValueError(f"overlap must not be negative, got {overlap}")
        if overlap >= window_size:
            raise ValueError(
                f"overlap ({overlap}) must be smaller than window_size ({window_size})"
            )
        self._window_size = window_size
        self._overlap = overlap

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def overlap(self) -> int:
        return self._overlap

    @property
    def stride(self) -> int:
        return self._window_size - self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str) -> list[str]:
        """Split *text* into word windows.

        Returns an empty list when *text* has no words.
        """
        words = text.split()
        if not words:
            return []
        return [
            " ".join(words[start : start + self._window_size])
            for start in range(0, len(words), self.stride)
        ]

    def chunk_blocks(self, blocks: list[TextBlock], source_document: str) -> list[Chunk]:
        """Chunk each block independently and number the results file-wide.

        ``sequence_index`` runs across all blocks of *source_document*, so
        it is also the object's ``chunk_index`` in the vector store.
        """
        chunks: list[Chunk] = []
        for block in blocks:
            for part, content in enumerate(self.chunk(block.text)):
                title = block.title
                if part > 0 and block.number_parts:
                    title = f"{block.title} (Part {part + 1})"
                chunks.append(
                    Chunk(
                        content=content,
                        title=title,
                        source_document=source_document,
                        sequence_index=len(chunks),
                    )
                )

        logger.debug(
            "blocks_chunked",
            source_document=source_document,
            blocks=len(blocks),
            chunks=len(chunks),
        )
        return chunks
