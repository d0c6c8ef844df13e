"""Pydantic data models shared across the ingestion pipelines."""

from ragingest.models.ingest import (
    TEXT_EXTENSIONS,
    BinaryFileResult,
    Chunk,
    DocumentMetadata,
    EnrichmentResult,
    ExtractionResult,
    FailedFile,
    IngestFile,
    IngestionConfig,
    IngestionSummary,
    ProcessedBinaryFile,
    TextBlock,
    TextFileResult,
    UploadedFileRecord,
)
from ragingest.models.llm import (
    MessagePayload,
    ObjectPayload,
    StringPayload,
    UnknownPayload,
    decode_message_payload,
)
from ragingest.models.schema import IndexSchema, SchemaProperty, build_index_schema

__all__ = [
    "TEXT_EXTENSIONS",
    "BinaryFileResult",
    "Chunk",
    "DocumentMetadata",
    "EnrichmentResult",
    "ExtractionResult",
    "FailedFile",
    "IndexSchema",
    "IngestFile",
    "IngestionConfig",
    "IngestionSummary",
    "MessagePayload",
    "ObjectPayload",
    "ProcessedBinaryFile",
    "SchemaProperty",
    "StringPayload",
    "TextBlock",
    "TextFileResult",
    "UnknownPayload",
    "UploadedFileRecord",
    "build_index_schema",
    "decode_message_payload",
]
