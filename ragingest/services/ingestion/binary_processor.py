"""Second-phase pipeline: extract, save and index stored binary files.

For each requested file id:

    1. load the :class:`UploadedFileRecord`
    2. download the stored bytes
    3. extract text with the extractor matching the record's MIME type
    4. save the text as a ``.txt`` sidecar next to the original (best effort)
    5. index the full text as one object, without chunking
    6. flip ``rag_processed`` to ``True``

Every step that fails for one file skips that file only; the returned list
contains just the files that completed.  Ids are processed concurrently,
after duplicates are collapsed so each record has a single writer.
"""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

import structlog

from ragingest.models.ingest import ProcessedBinaryFile, UploadedFileRecord
from ragingest.models.schema import chunk_properties
from ragingest.services.ingestion.extractors import select_extractor
from ragingest.utils.concurrency import throttled_gather
from ragingest.utils.errors import ExtractionError, PipelineError, StorageError, VectorStoreError

if TYPE_CHECKING:
    from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
    from ragingest.interfaces.file_record_provider import IFileRecordProvider
    from ragingest.interfaces.vector_store_provider import IVectorStoreProvider
    from ragingest.models.ingest import IngestionConfig
    from ragingest.services.ingestion.extractors import BaseExtractor
    from ragingest.services.ingestion.schema_bootstrapper import SchemaBootstrapper

logger = structlog.get_logger(logger_name=__name__)

_LAST_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def sidecar_name(file_name: str) -> str:
    """Replace the last extension of *file_name* with ``.txt`` (append if none)."""
    if _LAST_EXTENSION_RE.search(file_name):
        return _LAST_EXTENSION_RE.sub(".txt", file_name)
    return f"{file_name}.txt"


def sidecar_path(file_name: str, owner_id: str | None) -> str:
    return f"{owner_id or 'anonymous'}/{sidecar_name(file_name)}"


class BinaryPostProcessor:
    """Turns stored binaries into indexed text on demand.

    Parameters
    ----------
    config:
        Frozen tunables (class name, concurrency).
    bootstrapper:
        Ensures the index class exists before the first insert.
    vector_store:
        Destination of the single object per file.
    blob_storage:
        Source of the binaries and destination of the sidecars.
    file_records:
        Tracking rows; read by id and flagged once processed.
    extractors:
        Extractors keyed by kind (see :func:`build_extractors`).
    """

    def __init__(
        self,
        config: IngestionConfig,
        bootstrapper: SchemaBootstrapper,
        vector_store: IVectorStoreProvider,
        blob_storage: IBlobStorageProvider,
        file_records: IFileRecordProvider,
        extractors: dict[str, BaseExtractor],
    ) -> None:
        self._config = config
        self._bootstrapper = bootstrapper
        self._vector_store = vector_store
        self._blob_storage = blob_storage
        self._file_records = file_records
        self._extractors = extractors

    async def process_binary_files(
        self,
        file_ids: list[str],
        owner_id: str | None = None,
    ) -> list[ProcessedBinaryFile]:
        """Extract and index each stored binary in *file_ids*.

        Ids that could not be processed are left out of the result; compare
        it with *file_ids* to detect partial failure.

        Raises
        ------
        PipelineError
            If *file_ids* is empty.
        SchemaError
            If the index class cannot be ensured.
        """
        if not file_ids:
            raise PipelineError(message="No file IDs provided")

        unique_ids = list(dict.fromkeys(file_ids))
        logger.info("binary_processing_started", requested=len(file_ids), unique=len(unique_ids))

        await self._bootstrapper.ensure_schema()

        semaphore = asyncio.Semaphore(self._config.max_concurrent_files)
        outcomes = await throttled_gather(
            [self._process_one(file_id, owner_id) for file_id in unique_ids],
            semaphore=semaphore,
        )

        processed: list[ProcessedBinaryFile] = []
        for file_id, outcome in zip(unique_ids, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "binary_processing_error",
                    file_id=file_id,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
            elif outcome is not None:
                processed.append(outcome)

        logger.info(
            "binary_processing_complete",
            requested=len(unique_ids),
            processed=len(processed),
            skipped=len(unique_ids) - len(processed),
        )
        return processed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _process_one(self, file_id: str, owner_id: str | None) -> ProcessedBinaryFile | None:
        try:
            record = await self._file_records.get(file_id)
        except StorageError as exc:
            logger.error("binary_record_lookup_failed", file_id=file_id, error=str(exc))
            return None
        if record is None:
            logger.error("binary_record_not_found", file_id=file_id)
            return None
        if record.rag_processed:
            logger.info("binary_already_processed", file_id=file_id, file_name=record.file_name)
            return None

        extractor = select_extractor(record.mime_type, self._extractors)
        if extractor is None:
            logger.warning(
                "binary_unsupported_type",
                file_id=file_id,
                file_name=record.file_name,
                mime_type=record.mime_type,
            )
            return None

        try:
            data = await self._blob_storage.download(record.storage_path)
        except StorageError as exc:
            logger.error(
                "binary_download_failed",
                file_id=file_id,
                file_name=record.file_name,
                error=str(exc),
            )
            return None

        try:
            extraction = await extractor.extract(data, record.mime_type, record.file_name)
        except ExtractionError as exc:
            logger.error(
                "binary_extraction_failed",
                file_id=file_id,
                file_name=record.file_name,
                extractor=extractor.kind,
                error=str(exc),
            )
            return None

        text = extraction.text
        if not text.strip():
            logger.warning("binary_no_text_extracted", file_id=file_id, file_name=record.file_name)
            return None

        await self._save_sidecar(record, text, owner_id or record.owner_id)

        if not await self._index(record, text, extractor.kind):
            return None

        try:
            await self._file_records.mark_processed(record.id)
        except StorageError as exc:
            logger.error(
                "binary_mark_processed_failed",
                file_id=file_id,
                file_name=record.file_name,
                error=str(exc),
            )
            return None

        logger.info(
            "binary_file_processed",
            file_id=file_id,
            file_name=record.file_name,
            extractor=extractor.kind,
            degraded=extraction.degraded,
            characters=len(text),
        )
        return ProcessedBinaryFile(
            id=record.id,
            name=record.file_name,
            sidecar_name=sidecar_name(record.file_name),
            extracted_length=len(text),
        )

    async def _save_sidecar(self, record: UploadedFileRecord, text: str, owner_id: str | None) -> None:
        """Store the extracted text as ``.txt``; failure is logged, never raised."""
        path = sidecar_path(record.file_name, owner_id)
        try:
            await self._blob_storage.upload(
                path,
                text.encode("utf-8"),
                content_type="text/plain",
                overwrite=True,
            )
        except StorageError as exc:
            logger.warning(
                "sidecar_save_failed",
                file_id=record.id,
                path=path,
                error=str(exc),
            )
            return
        logger.info("sidecar_saved", file_id=record.id, path=path)

    async def _index(self, record: UploadedFileRecord, text: str, blob_type: str) -> bool:
        properties = chunk_properties(
            text=text,
            blob_type=blob_type,
            document_name=record.file_name,
            chunk_index=0,
        )
        try:
            await self._vector_store.insert_object(self._config.class_name, properties)
        except VectorStoreError as exc:
            logger.error(
                "binary_index_failed",
                file_id=record.id,
                file_name=record.file_name,
                error=str(exc),
            )
            return False
        return True
