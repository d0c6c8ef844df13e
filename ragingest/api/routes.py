"""FastAPI routes for the ingestion pipelines.

Endpoint                          Method  Description
------------------------------------------------------------------------
/api/v1/ingest/files              POST    Index text files, store binaries
/api/v1/ingest/binary/process     POST    Extract + index stored binaries
/api/v1/health                    GET     Health check + provider status

Services are resolved from ``app.state`` (populated in ``main.build_pipeline``)
through ``Depends`` helpers.  Pipeline errors are not caught here: the
``ErrorHandlingMiddleware`` turns any ``IngestError`` into one HTTP 500.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request

from ragingest.api.schemas import (
    HealthResponse,
    IngestFilesRequest,
    IngestFilesResponse,
    ProcessBinaryRequest,
    ProcessBinaryResponse,
    ProcessedFileOut,
)
from ragingest.models.ingest import IngestFile, IngestionConfig
from ragingest.services.ingestion.binary_processor import BinaryPostProcessor
from ragingest.services.ingestion.ingestion_service import IngestionService
from ragingest.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1")


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_binary_processor(request: Request) -> BinaryPostProcessor:
    return request.app.state.binary_processor


def _get_ingestion_config(request: Request) -> IngestionConfig:
    return request.app.state.ingestion_config


IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
BinaryProcessorDep = Annotated[BinaryPostProcessor, Depends(_get_binary_processor)]
IngestionConfigDep = Annotated[IngestionConfig, Depends(_get_ingestion_config)]


@router.post(
    "/ingest/files",
    response_model=IngestFilesResponse,
    summary="Ingest uploaded files",
)
async def ingest_files(
    body: IngestFilesRequest,
    service: IngestionServiceDep,
    config: IngestionConfigDep,
) -> IngestFilesResponse:
    """Index text files into the vector store and park binaries in blob storage."""
    files = [
        IngestFile.from_upload(
            name=f.name,
            content=f.content,
            mime_type=f.mime_type,
            byte_size=f.size,
            is_text_file=f.is_text_file,
            text_extensions=config.text_extensions,
        )
        for f in body.files
    ]
    _logger.info("ingest_files_request", files=len(files), owner_id=body.owner_id)
    summary = await service.ingest_files(files, owner_id=body.owner_id, owner_name=body.owner_name)
    return IngestFilesResponse.from_summary(summary)


@router.post(
    "/ingest/binary/process",
    response_model=ProcessBinaryResponse,
    summary="Extract and index stored binary files",
)
async def process_binary_files(
    body: ProcessBinaryRequest,
    processor: BinaryProcessorDep,
) -> ProcessBinaryResponse:
    """Run the post-processor over *fileIds*; ids that fail are omitted."""
    _logger.info("process_binary_request", file_ids=len(body.file_ids), owner_id=body.owner_id)
    processed = await processor.process_binary_files(body.file_ids, owner_id=body.owner_id)
    return ProcessBinaryResponse(files=[ProcessedFileOut.from_result(p) for p in processed])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    bootstrapper = getattr(request.app.state, "schema_bootstrapper", None)
    if bootstrapper is not None:
        providers["schema_ensured"] = bootstrapper.is_ensured

    if providers.get("vector_store") and providers.get("storage"):
        status = "healthy" if providers.get("llm") else "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=_VERSION, providers=providers)
