"""Orchestrator for the upload-time ingestion pipeline.

Each file of a request is classified once, by its ``is_text_file`` flag,
and follows one of two paths:

**Text path**: parse -> (enrich) -> chunk -> batch upload

    1. Parser -- JSON/JSONL items, CSV rows, or the whole file as one block
    2. MetadataEnricher -- title/category/department for free-text files
    3. TextChunker -- 220-word windows with 40 words of overlap
    4. IVectorStoreProvider -- batches of 100 objects, sent strictly in order

**Binary path**: decode -> blob storage -> file record

    The base64 payload is stored at ``<owner>/<name>`` (or
    ``anonymous/<epoch-ms>_<name>``) and an :class:`UploadedFileRecord` with
    ``rag_processed=False`` is inserted.  Extraction happens later, in
    :class:`~ragingest.services.ingestion.binary_processor.BinaryPostProcessor`.

Parsing and enrichment of different text files run concurrently (files
share no state); uploads then run one file and one batch at a time, so
``chunk_index`` order on the wire matches file order.  Text-path failures
abort the call: batches already sent stay committed.  Binary-path failures
are isolated per file and reported in ``failed_files``.

All dependencies are injected via the constructor.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import math
import time
from typing import TYPE_CHECKING

import structlog

from ragingest.models.ingest import (
    BinaryFileResult,
    Chunk,
    FailedFile,
    IngestFile,
    IngestionConfig,
    IngestionSummary,
    TextBlock,
    TextFileResult,
)
from ragingest.models.schema import chunk_properties
from ragingest.services.ingestion.extractors import extractor_kind_for
from ragingest.services.ingestion.parsers import (
    DEFAULT_SENDER,
    blob_type_for,
    build_text_block,
    parse_csv_blocks,
    parse_json_blocks,
    text_format_for,
)
from ragingest.utils.concurrency import throttled_gather
from ragingest.utils.errors import (
    BatchUploadError,
    IngestError,
    ParseError,
    PipelineError,
    VectorStoreError,
)

if TYPE_CHECKING:
    from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
    from ragingest.interfaces.file_record_provider import IFileRecordProvider
    from ragingest.interfaces.vector_store_provider import IVectorStoreProvider
    from ragingest.services.ingestion.chunker import TextChunker
    from ragingest.services.ingestion.metadata_enricher import MetadataEnricher
    from ragingest.services.ingestion.schema_bootstrapper import SchemaBootstrapper

logger = structlog.get_logger(logger_name=__name__)


def binary_storage_path(name: str, owner_id: str | None, now_ms: int | None = None) -> str:
    """Return the blob path for a binary upload.

    Owned files overwrite earlier uploads of the same name; anonymous ones
    get a millisecond timestamp prefix so they don't collide.
    """
    if owner_id:
        return f"{owner_id}/{name}"
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"anonymous/{now_ms}_{name}"


def decode_binary_content(raw_content: str) -> bytes:
    """Decode a base64 payload, accepting an optional ``data:...;base64,`` prefix."""
    payload = raw_content.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ParseError(message=f"Invalid base64 content: {exc}") from exc


class IngestionService:
    """Runs the upload-time pipeline for one batch of files.

    Parameters
    ----------
    config:
        Frozen tunables (class name, batch size, preview length, concurrency).
    chunker:
        Word-window chunker.
    enricher:
        LLM metadata for free-text files.
    bootstrapper:
        Ensures the index class exists before the first write.
    vector_store:
        Destination of the chunk batches.
    blob_storage:
        Destination of binary uploads.
    file_records:
        Tracking rows for stored binaries.
    """

    def __init__(
        self,
        config: IngestionConfig,
        chunker: TextChunker,
        enricher: MetadataEnricher,
        bootstrapper: SchemaBootstrapper,
        vector_store: IVectorStoreProvider,
        blob_storage: IBlobStorageProvider,
        file_records: IFileRecordProvider,
    ) -> None:
        self._config = config
        self._chunker = chunker
        self._enricher = enricher
        self._bootstrapper = bootstrapper
        self._vector_store = vector_store
        self._blob_storage = blob_storage
        self._file_records = file_records

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_files(
        self,
        files: list[IngestFile],
        owner_id: str | None = None,
        owner_name: str | None = None,
    ) -> IngestionSummary:
        """Ingest *files*: index text files and store binary files.

        Parameters
        ----------
        files:
            The uploaded files, each already classified as text or binary.
        owner_id:
            Owner of the upload; ``None`` stores binaries under ``anonymous/``.
        owner_name:
            Display name written as ``sender_name`` for free-text files.

        Returns
        -------
        IngestionSummary
            Indexed text files, stored binaries and binaries that failed.

        Raises
        ------
        PipelineError
            If *files* is empty.
        SchemaError
            If the index class cannot be ensured.
        ParseError
            If a JSON/JSONL/CSV file yields no usable items.
        BatchUploadError
            If the vector store rejects a batch.  Earlier batches remain.
        """
        if not files:
            raise PipelineError(message="No files provided")

        start = time.monotonic()
        accepted = [f for f in files if self._accept(f)]
        text_files = [f for f in accepted if f.is_text_file]
        binary_files = [f for f in accepted if not f.is_text_file]

        logger.info(
            "ingestion_started",
            files=len(files),
            text_files=len(text_files),
            binary_files=len(binary_files),
            owner_id=owner_id,
        )

        await self._bootstrapper.ensure_schema()

        text_results = await self._ingest_text_files(text_files, owner_name or DEFAULT_SENDER)

        binary_results: list[BinaryFileResult] = []
        failed: list[FailedFile] = []
        for file in binary_files:
            try:
                result = await self._store_binary(file, owner_id)
            except IngestError as exc:
                logger.error("binary_file_failed", file_name=file.name, error=str(exc))
                failed.append(FailedFile(name=file.name, error=str(exc)))
                continue
            if result is not None:
                binary_results.append(result)

        logger.info(
            "ingestion_complete",
            text_files=len(text_results),
            chunks=sum(r.chunk_count for r in text_results),
            binary_files=len(binary_results),
            failed_files=len(failed),
            elapsed_s=round(time.monotonic() - start, 2),
        )
        return IngestionSummary(
            text_files=text_results,
            binary_files=binary_results,
            failed_files=failed,
        )

    # ------------------------------------------------------------------
    # Text path
    # ------------------------------------------------------------------

    async def _ingest_text_files(
        self,
        files: list[IngestFile],
        sender_name: str,
    ) -> list[TextFileResult]:
        if not files:
            return []

        semaphore = asyncio.Semaphore(self._config.max_concurrent_files)
        prepared = await throttled_gather(
            [self._prepare_text_file(f, sender_name) for f in files],
            semaphore=semaphore,
        )
        # Surface the first failure in file order; nothing has been uploaded yet.
        for outcome in prepared:
            if isinstance(outcome, BaseException):
                raise outcome

        results: list[TextFileResult] = []
        for file, chunks in zip(files, prepared):
            await self._upload_chunks(file.name, chunks)
            results.append(TextFileResult(name=file.name, chunk_count=len(chunks)))
            logger.info("text_file_indexed", file_name=file.name, chunks=len(chunks))
        return results

    async def _prepare_text_file(self, file: IngestFile, sender_name: str) -> list[Chunk]:
        """Parse (and enrich) one text file into its ordered chunk list."""
        blocks = await self._build_blocks(file, sender_name)
        return self._chunker.chunk_blocks(blocks, source_document=file.name)

    async def _build_blocks(self, file: IngestFile, sender_name: str) -> list[TextBlock]:
        fmt = text_format_for(file.name)
        if fmt == "json":
            return parse_json_blocks(file.name, file.raw_content)
        if fmt == "csv":
            return parse_csv_blocks(file.name, file.raw_content)

        enrichment = await self._enricher.enrich(
            file.name,
            file.raw_content[: self._config.preview_chars],
        )
        if enrichment.degraded:
            logger.warning(
                "text_file_default_metadata",
                file_name=file.name,
                reason=enrichment.reason,
            )
        return [build_text_block(file.raw_content, enrichment.metadata, sender_name)]

    async def _upload_chunks(self, file_name: str, chunks: list[Chunk]) -> None:
        """Send *chunks* in order, ``batch_size`` objects per request.

        Raises
        ------
        BatchUploadError
            Naming the failing batch.  Earlier batches are not rolled back.
        """
        batch_size = self._config.batch_size
        total = math.ceil(len(chunks) / batch_size)
        blob_type = blob_type_for(file_name)
        class_name = self._config.class_name

        for number, offset in enumerate(range(0, len(chunks), batch_size), start=1):
            batch = chunks[offset : offset + batch_size]
            objects = [
                chunk_properties(
                    text=chunk.content,
                    blob_type=blob_type,
                    document_name=file_name,
                    chunk_index=chunk.sequence_index,
                )
                for chunk in batch
            ]
            try:
                await self._vector_store.batch_insert(class_name, objects)
            except VectorStoreError as exc:
                logger.error(
                    "batch_upload_failed",
                    file_name=file_name,
                    batch=number,
                    total_batches=total,
                    committed_batches=number - 1,
                    error=str(exc),
                )
                raise BatchUploadError(
                    message=f"Failed to insert batch {number}/{total} of {file_name}: {exc.message}",
                    provider_name=exc.provider_name,
                ) from exc
            logger.info(
                "batch_uploaded",
                file_name=file_name,
                batch=number,
                total_batches=total,
                objects=len(objects),
            )

    # ------------------------------------------------------------------
    # Binary path
    # ------------------------------------------------------------------

    async def _store_binary(self, file: IngestFile, owner_id: str | None) -> BinaryFileResult | None:
        """Store one binary and record it; ``None`` when its type is unsupported."""
        if extractor_kind_for(file.mime_type) is None:
            logger.warning(
                "binary_file_unsupported_type",
                file_name=file.name,
                mime_type=file.mime_type,
            )
            return None

        data = decode_binary_content(file.raw_content)
        path = binary_storage_path(file.name, owner_id)
        stored_path = await self._blob_storage.upload(
            path,
            data,
            content_type=file.mime_type,
            overwrite=True,
        )
        record = await self._file_records.insert(
            owner_id=owner_id,
            file_name=file.name,
            mime_type=file.mime_type,
            byte_size=file.byte_size or len(data),
            storage_path=stored_path,
        )
        logger.info(
            "binary_file_stored",
            file_name=file.name,
            file_id=record.id,
            storage_path=stored_path,
            bytes=len(data),
        )
        return BinaryFileResult(id=record.id, name=file.name, storage_path=stored_path)

    @staticmethod
    def _accept(file: IngestFile) -> bool:
        if not file.name or not file.raw_content:
            logger.warning("file_skipped", file_name=file.name or None, reason="missing name or content")
            return False
        return True
