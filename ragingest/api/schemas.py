"""Pydantic request/response schemas for the ragingest HTTP API.

Wire field names are camelCase (``isTextFile``, ``chunkCount``, ...) to
match the upload client; Python attributes stay snake_case.  Requests
accept either spelling.  Response fields carry a single camelCase alias used for both directions.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ragingest.models.ingest import (
    BinaryFileResult,
    FailedFile,
    IngestionSummary,
    ProcessedBinaryFile,
    TextFileResult,
)

_CAMEL = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class IngestFileInput(BaseModel):
    """One uploaded file: text content, or base64 content for binaries."""

    model_config = _CAMEL

    name: str = ""
    content: str = ""
    is_text_file: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("isTextFile", "is_text_file"),
        description="Derived from the file extension when omitted.",
    )
    mime_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("mimeType", "fileType", "mime_type"),
    )
    size: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("size", "fileSize"),
    )


class IngestFilesRequest(BaseModel):
    """Body of ``POST /api/v1/ingest/files``."""

    model_config = _CAMEL

    files: list[IngestFileInput] = Field(default_factory=list)
    owner_id: str | None = Field(default=None, validation_alias=AliasChoices("ownerId", "owner_id"))
    owner_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ownerName", "owner_name"),
    )


class ProcessBinaryRequest(BaseModel):
    """Body of ``POST /api/v1/ingest/binary/process``."""

    model_config = _CAMEL

    file_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("fileIds", "file_ids"),
    )
    owner_id: str | None = Field(default=None, validation_alias=AliasChoices("ownerId", "owner_id"))


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TextFileOut(BaseModel):
    model_config = _CAMEL

    name: str
    chunk_count: int = Field(alias="chunkCount")

    @classmethod
    def from_result(cls, result: TextFileResult) -> TextFileOut:
        return cls(name=result.name, chunk_count=result.chunk_count)


class BinaryFileOut(BaseModel):
    model_config = _CAMEL

    id: str
    name: str
    storage_path: str = Field(alias="storagePath")

    @classmethod
    def from_result(cls, result: BinaryFileResult) -> BinaryFileOut:
        return cls(id=result.id, name=result.name, storage_path=result.storage_path)


class FailedFileOut(BaseModel):
    name: str
    error: str

    @classmethod
    def from_result(cls, result: FailedFile) -> FailedFileOut:
        return cls(name=result.name, error=result.error)


class IngestFilesResponse(BaseModel):
    """Outcome of one upload batch."""

    model_config = _CAMEL

    message: str = "Files processed successfully"
    text_files: list[TextFileOut] = Field(default_factory=list, alias="textFiles")
    binary_files: list[BinaryFileOut] = Field(default_factory=list, alias="binaryFiles")
    failed_files: list[FailedFileOut] = Field(default_factory=list, alias="failedFiles")

    @classmethod
    def from_summary(cls, summary: IngestionSummary) -> IngestFilesResponse:
        return cls(
            text_files=[TextFileOut.from_result(r) for r in summary.text_files],
            binary_files=[BinaryFileOut.from_result(r) for r in summary.binary_files],
            failed_files=[FailedFileOut.from_result(r) for r in summary.failed_files],
        )


class ProcessedFileOut(BaseModel):
    model_config = _CAMEL

    id: str
    name: str
    sidecar_name: str = Field(alias="sidecarName")
    extracted_length: int = Field(alias="extractedLength")

    @classmethod
    def from_result(cls, result: ProcessedBinaryFile) -> ProcessedFileOut:
        return cls(
            id=result.id,
            name=result.name,
            sidecar_name=result.sidecar_name,
            extracted_length=result.extracted_length,
        )


class ProcessBinaryResponse(BaseModel):
    """Files whose extracted text was indexed; unprocessable ids are absent."""

    message: str = "Binary files processed successfully"
    files: list[ProcessedFileOut] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
