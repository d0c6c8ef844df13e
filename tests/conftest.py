"""Shared pytest fixtures for the ragingest test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from ragingest.config.settings import Settings
from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
from ragingest.interfaces.file_record_provider import IFileRecordProvider
from ragingest.interfaces.llm_provider import ILLMProvider
from ragingest.interfaces.vector_store_provider import IVectorStoreProvider
from ragingest.models.ingest import IngestionConfig, UploadedFileRecord
from ragingest.models.schema import build_index_schema


def make_settings(**overrides: Any) -> Settings:
    """Build Settings with every backend configured, ignoring any local .env file."""
    defaults: dict[str, Any] = {
        "llm_provider": "auto",
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "openai_vision_model": "",
        "anthropic_api_key": "",
        "anthropic_model": "",
        "ollama_base_url": "",
        "weaviate_url": "https://weaviate.test",
        "weaviate_api_key": "wv-test",
        "weaviate_class_name": "",
        "weaviate_embedding_model": "",
        "storage_backend": "supabase",
        "supabase_url": "https://supabase.test",
        "supabase_service_key": "sb-test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def make_record(**overrides: Any) -> UploadedFileRecord:
    """Build an unprocessed PDF record owned by ``user-1``."""
    defaults: dict[str, Any] = {
        "id": "file-1",
        "owner_id": "user-1",
        "file_name": "report.pdf",
        "mime_type": "application/pdf",
        "byte_size": 1024,
        "storage_path": "user-1/report.pdf",
    }
    defaults.update(overrides)
    return UploadedFileRecord(**defaults)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def ingestion_config() -> IngestionConfig:
    return IngestionConfig(class_name="Text", batch_size=100, max_concurrent_files=4)


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal configuration dict as produced by ``load_config``."""
    return {
        "schema": {
            "class_name": "Text",
            "description": "Chunks of documents for RAG",
            "embedding_model": "text-embedding-3-large",
        },
        "chunking": {"window_size": 220, "overlap": 40},
        "upload": {"batch_size": 100},
        "enrichment": {"preview_chars": 500},
        "pipeline": {"max_concurrent_files": 4},
    }


# ---------------------------------------------------------------------------
# Provider mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MagicMock:
    """Vision-capable LLM returning a well-formed metadata JSON object."""
    llm = MagicMock(spec=ILLMProvider)
    llm.complete = AsyncMock(
        return_value='{"title": "Quarterly Report", "category": "Report", "department": "Finance"}'
    )
    llm.vision_extract = AsyncMock(return_value="INVOICE 42\nTotal due: 100 EUR")
    llm.supports_vision.return_value = True
    llm.get_provider_name.return_value = "mock-llm"
    llm.is_available.return_value = True
    return llm


@pytest.fixture
def mock_vector_store() -> MagicMock:
    store = MagicMock(spec=IVectorStoreProvider)
    store.class_exists = AsyncMock(return_value=True)
    store.create_class = AsyncMock(return_value=True)
    store.batch_insert = AsyncMock(return_value=[])
    store.insert_object = AsyncMock(return_value={"id": "obj-1"})
    store.get_provider_name.return_value = "mock-vector-store"
    return store


@pytest.fixture
def mock_blob_storage() -> MagicMock:
    storage = MagicMock(spec=IBlobStorageProvider)

    async def _upload(path: str, data: bytes, content_type: str, overwrite: bool = True) -> str:
        return path

    storage.upload = AsyncMock(side_effect=_upload)
    storage.download = AsyncMock(return_value=b"%PDF-1.4 Hello readable world text here %%EOF")
    storage.get_provider_name.return_value = "mock-storage"
    return storage


@pytest.fixture
def mock_file_records() -> MagicMock:
    records = MagicMock(spec=IFileRecordProvider)
    records.initialize = AsyncMock()

    async def _insert(owner_id, file_name, mime_type, byte_size, storage_path):  # noqa: ANN001, ANN202
        return UploadedFileRecord(
            id=f"id-{file_name}",
            owner_id=owner_id,
            file_name=file_name,
            mime_type=mime_type,
            byte_size=byte_size,
            storage_path=storage_path,
        )

    records.insert = AsyncMock(side_effect=_insert)
    records.get = AsyncMock(return_value=make_record())
    records.mark_processed = AsyncMock()
    records.get_provider_name.return_value = "mock-records"
    return records


@pytest.fixture
def index_schema():
    return build_index_schema("Text")


@pytest.fixture
def settings_factory():
    """Return :func:`make_settings` so tests can override individual fields."""
    return make_settings


@pytest.fixture
def record_factory():
    """Return :func:`make_record` so tests can override individual fields."""
    return make_record
