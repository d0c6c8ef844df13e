"""Data models for the document-ingestion pipeline.

Defines Pydantic v2 models for the request-scoped upload (:class:`IngestFile`),
the durable binary-upload record (:class:`UploadedFileRecord`), the transient
chunk and metadata types, and the summaries both pipelines return.  Models
are frozen, so a value built at one stage cannot be mutated by a later one.

Lifecycle:
    * IngestFile -- built once per uploaded file, never persisted.
    * UploadedFileRecord -- inserted when a binary lands in blob storage;
      ``rag_processed`` flips False -> True once, after indexing.
    * Chunk / DocumentMetadata -- produced and discarded inside one call.
"""

from __future__ import annotations

from datetime import date
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Extensions read as text by the uploader.  Anything else is treated as
# binary and stored for deferred extraction.
TEXT_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".txt",
        ".md",
        ".json",
        ".jsonl",
        ".csv",
        ".xml",
        ".yaml",
        ".yml",
        ".log",
        ".js",
        ".ts",
        ".tsx",
        ".html",
        ".css",
    }
)


def file_extension(name: str) -> str:
    """Return the lower-cased final extension of *name* (``""`` if none)."""
    return PurePosixPath(name.lower()).suffix


def is_text_file_name(name: str, extensions: frozenset[str] = TEXT_EXTENSIONS) -> bool:
    """Return ``True`` when *name*'s extension is on the text allow-list."""
    return file_extension(name) in extensions


# ---------------------------------------------------------------------------
# Pipeline configuration
# ---------------------------------------------------------------------------
class IngestionConfig(BaseModel):
    """Validated, immutable settings the pipelines are constructed with.

    Built once at startup by :func:`ragingest.config.loader.build_ingestion_config`.
    """

    model_config = ConfigDict(frozen=True)

    class_name: str = Field(min_length=1, description="Target vector-index class.")
    class_description: str = "Chunks of documents for RAG"
    embedding_model: str = "text-embedding-3-large"
    window_size: int = Field(default=220, gt=0, description="Words per chunk.")
    overlap: int = Field(default=40, ge=0, description="Words shared by neighbouring chunks.")
    batch_size: int = Field(default=100, gt=0, description="Objects per batch insert.")
    preview_chars: int = Field(default=500, gt=0, description="Characters sent to the enricher.")
    max_concurrent_files: int = Field(default=4, gt=0)
    text_extensions: frozenset[str] = TEXT_EXTENSIONS

    @model_validator(mode="after")
    def _check_stride(self) -> IngestionConfig:
        if self.overlap >= self.window_size:
            raise ValueError(
                f"overlap ({self.overlap}) must be smaller than window_size ({self.window_size})"
            )
        return self


# ---------------------------------------------------------------------------
# IngestFile -- one uploaded file, request-scoped.
# ---------------------------------------------------------------------------
class IngestFile(BaseModel):
    """A single file submitted for ingestion.

    ``raw_content`` holds the decoded text for text files and the base64
    payload for binary files.  ``is_text_file`` is decided once, when the
    file is built, and every later stage reads it instead of re-deriving it.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    raw_content: str = ""
    is_text_file: bool = True
    mime_type: str = "application/octet-stream"
    byte_size: int = Field(default=0, ge=0)

    @classmethod
    def from_upload(
        cls,
        name: str,
        content: str,
        mime_type: str | None = None,
        byte_size: int | None = None,
        is_text_file: bool | None = None,
        text_extensions: frozenset[str] = TEXT_EXTENSIONS,
    ) -> IngestFile:
        """Build an IngestFile, classifying by extension when the caller didn't."""
        if is_text_file is None:
            is_text_file = is_text_file_name(name, text_extensions)
        return cls(
            name=name,
            raw_content=content,
            is_text_file=is_text_file,
            mime_type=mime_type or ("text/plain" if is_text_file else "application/octet-stream"),
            byte_size=byte_size if byte_size is not None else len(content),
        )


# ---------------------------------------------------------------------------
# UploadedFileRecord -- durable tracking row for a stored binary.
# ---------------------------------------------------------------------------
class UploadedFileRecord(BaseModel):
    """Tracking row for a binary file persisted to blob storage."""

    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str | None = None
    file_name: str
    mime_type: str
    byte_size: int = Field(default=0, ge=0)
    storage_path: str
    is_text_file: bool = False
    rag_processed: bool = False


# ---------------------------------------------------------------------------
# Transient pipeline values
# ---------------------------------------------------------------------------
class DocumentMetadata(BaseModel):
    """Descriptive fields shared by every chunk of one source document."""

    model_config = ConfigDict(frozen=True)

    title: str
    category: str = "General"
    department: str = "Support"
    effective_date: date = Field(default_factory=date.today)


class EnrichmentResult(BaseModel):
    """Enricher output.  Always usable; ``degraded`` marks a fallback."""

    model_config = ConfigDict(frozen=True)

    metadata: DocumentMetadata
    degraded: bool = False
    reason: str | None = None


class ExtractionResult(BaseModel):
    """Extractor output.  ``degraded`` marks placeholder / best-effort text."""

    model_config = ConfigDict(frozen=True)

    text: str
    extractor: str
    degraded: bool = False


class TextBlock(BaseModel):
    """One independently chunked unit of a text file (JSON item, CSV row, whole file).

    When ``number_parts`` is set, chunks after the first get a
    ``" (Part N)"`` title suffix.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    title: str
    number_parts: bool = True


class Chunk(BaseModel):
    """A word-window slice of one source document, ready for upload."""

    model_config = ConfigDict(frozen=True)

    content: str
    title: str
    source_document: str
    sequence_index: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------
class TextFileResult(BaseModel):
    """A text file that reached the index."""

    model_config = ConfigDict(frozen=True)

    name: str
    chunk_count: int = Field(ge=0)


class BinaryFileResult(BaseModel):
    """A binary file stored and awaiting post-processing."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    storage_path: str


class FailedFile(BaseModel):
    """A binary file that could not be stored; other files were unaffected."""

    model_config = ConfigDict(frozen=True)

    name: str
    error: str


class IngestionSummary(BaseModel):
    """Everything one ``ingest_files`` call achieved."""

    model_config = ConfigDict(frozen=True)

    text_files: list[TextFileResult] = Field(default_factory=list)
    binary_files: list[BinaryFileResult] = Field(default_factory=list)
    failed_files: list[FailedFile] = Field(default_factory=list)


class ProcessedBinaryFile(BaseModel):
    """A stored binary whose extracted text was indexed."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    sidecar_name: str
    extracted_length: int = Field(ge=0)
