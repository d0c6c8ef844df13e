"""ragingest FastAPI application entry point.

Wires every provider and service together via dependency injection.  Loads
configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and exposes the ingestion routes.

``build_pipeline`` is also used by the CLI to get the same services outside
the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from ragingest.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from ragingest.api.routes import router as api_router
from ragingest.config.loader import build_ingestion_config, load_config
from ragingest.config.settings import Settings
from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
from ragingest.interfaces.llm_provider import ILLMProvider
from ragingest.models.schema import build_index_schema
from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider
from ragingest.providers.llm.ollama_provider import OllamaLLMProvider
from ragingest.providers.llm.openai_provider import OpenAILLMProvider
from ragingest.providers.records.sqlite_file_record_provider import SQLiteFileRecordProvider
from ragingest.providers.storage.local_storage_provider import LocalStorageProvider
from ragingest.providers.storage.supabase_storage_provider import SupabaseStorageProvider
from ragingest.providers.vector_store.weaviate_provider import WeaviateVectorStoreProvider
from ragingest.services.ingestion.binary_processor import BinaryPostProcessor
from ragingest.services.ingestion.chunker import TextChunker
from ragingest.services.ingestion.extractors import build_extractors
from ragingest.services.ingestion.ingestion_service import IngestionService
from ragingest.services.ingestion.metadata_enricher import MetadataEnricher
from ragingest.services.ingestion.schema_bootstrapper import SchemaBootstrapper
from ragingest.utils.errors import ConfigurationError
from ragingest.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------

_LLM_PROVIDERS = {
    "anthropic": AnthropicLLMProvider,
    "openai": OpenAILLMProvider,
    "ollama": OllamaLLMProvider,
}


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Return the configured LLM provider, or ``None`` when none is usable.

    ``llm_provider=auto`` picks the first configured of
    Anthropic -> OpenAI -> Ollama.
    """
    choice = app_settings.llm_provider.lower()
    if choice == "auto":
        available = app_settings.get_available_llm_providers()
        if not available:
            return None
        choice = available[0]

    provider_cls = _LLM_PROVIDERS.get(choice)
    if provider_cls is None:
        raise ConfigurationError(
            f"Unknown LLM_PROVIDER '{app_settings.llm_provider}' "
            f"(expected auto, {', '.join(_LLM_PROVIDERS)})"
        )
    provider = provider_cls(settings=app_settings)
    if not provider.is_available():
        raise ConfigurationError(f"LLM_PROVIDER '{choice}' selected but not configured")
    return provider


def _build_blob_storage(app_settings: Settings, http_client: httpx.AsyncClient) -> IBlobStorageProvider:
    if app_settings.storage_backend == "local":
        return LocalStorageProvider(root_dir=app_settings.local_storage_dir)
    return SupabaseStorageProvider(
        http_client=http_client,
        supabase_url=app_settings.supabase_url,
        service_key=app_settings.supabase_service_key,
        bucket=app_settings.storage_bucket,
    )


def build_pipeline(
    custom_settings: Settings | None = None,
    custom_config: dict | None = None,
) -> dict[str, Any]:
    """Construct every provider and service with injected dependencies.

    Returns a flat dict of named components (stored on ``app.state`` by the
    web server, used directly by the CLI).

    Raises
    ------
    ConfigurationError
        If a required endpoint or credential is missing.  Nothing is
        constructed in that case.
    """
    s = custom_settings or settings
    ingestion_config = build_ingestion_config(
        s, custom_config if custom_config is not None else config
    )

    http_client = httpx.AsyncClient(timeout=60.0)

    llm = _build_llm_provider(s)
    vector_store = WeaviateVectorStoreProvider(
        http_client=http_client,
        base_url=s.weaviate_url,
        api_key=s.weaviate_api_key,
        openai_api_key=s.openai_api_key,
    )
    blob_storage = _build_blob_storage(s, http_client)
    file_records = SQLiteFileRecordProvider(db_path=s.file_record_db_path)

    schema = build_index_schema(
        class_name=ingestion_config.class_name,
        embedding_model=ingestion_config.embedding_model,
        description=ingestion_config.class_description,
    )
    bootstrapper = SchemaBootstrapper(vector_store=vector_store, schema=schema)

    llm_timeout = s.llm_timeout_seconds * (s.llm_max_retries + 1)
    chunker = TextChunker(
        window_size=ingestion_config.window_size,
        overlap=ingestion_config.overlap,
    )
    enricher = MetadataEnricher(llm=llm, timeout=llm_timeout)
    extractors = build_extractors(llm, vision_timeout=llm_timeout)

    ingestion_service = IngestionService(
        config=ingestion_config,
        chunker=chunker,
        enricher=enricher,
        bootstrapper=bootstrapper,
        vector_store=vector_store,
        blob_storage=blob_storage,
        file_records=file_records,
    )
    binary_processor = BinaryPostProcessor(
        config=ingestion_config,
        bootstrapper=bootstrapper,
        vector_store=vector_store,
        blob_storage=blob_storage,
        file_records=file_records,
        extractors=extractors,
    )

    provider_registry: dict[str, Any] = {
        "llm": llm is not None,
        "llm_provider": llm.get_provider_name() if llm is not None else None,
        "vision": llm is not None and llm.supports_vision(),
        "vector_store": True,
        "storage": True,
        "storage_provider": blob_storage.get_provider_name(),
    }

    return {
        "settings": s,
        "http_client": http_client,
        "ingestion_config": ingestion_config,
        "llm": llm,
        "vector_store": vector_store,
        "blob_storage": blob_storage,
        "file_records": file_records,
        "schema_bootstrapper": bootstrapper,
        "ingestion_service": ingestion_service,
        "binary_processor": binary_processor,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build providers and services on startup, close the HTTP client on shutdown."""
    components = build_pipeline(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["file_records"].initialize()

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        class_name=components["ingestion_config"].class_name,
        llm=components["provider_registry"]["llm_provider"],
        storage=components["provider_registry"]["storage_provider"],
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="ragingest API",
        version=_VERSION,
        description=(
            "Ingest uploaded documents into a Weaviate index: parse, enrich and "
            "chunk text files; store binaries and extract their text on demand."
        ),
        lifespan=_lifespan,
    )

    # Last added runs first.
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "ragingest.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
