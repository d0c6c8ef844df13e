"""Unit tests for the provider factories and pipeline wiring in ragingest.main."""

from __future__ import annotations

from pathlib import Path

import pytest

from ragingest.main import _build_llm_provider, build_pipeline, create_app
from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider
from ragingest.providers.llm.ollama_provider import OllamaLLMProvider
from ragingest.providers.llm.openai_provider import OpenAILLMProvider
from ragingest.providers.storage.local_storage_provider import LocalStorageProvider
from ragingest.providers.storage.supabase_storage_provider import SupabaseStorageProvider
from ragingest.services.ingestion.binary_processor import BinaryPostProcessor
from ragingest.services.ingestion.ingestion_service import IngestionService
from ragingest.utils.errors import ConfigurationError


class TestBuildLLMProvider:
    def test_auto_without_credentials_returns_none(self, settings_factory) -> None:
        assert _build_llm_provider(settings_factory(openai_api_key="")) is None

    def test_auto_prefers_anthropic(self, settings_factory) -> None:
        provider = _build_llm_provider(settings_factory(anthropic_api_key="sk-ant"))
        assert isinstance(provider, AnthropicLLMProvider)

    def test_auto_falls_back_to_openai(self, settings_factory) -> None:
        assert isinstance(_build_llm_provider(settings_factory()), OpenAILLMProvider)

    def test_explicit_ollama(self, settings_factory) -> None:
        provider = _build_llm_provider(
            settings_factory(llm_provider="ollama", ollama_base_url="http://localhost:11434")
        )
        assert isinstance(provider, OllamaLLMProvider)

    def test_unknown_provider_raises(self, settings_factory) -> None:
        with pytest.raises(ConfigurationError, match="Unknown LLM_PROVIDER"):
            _build_llm_provider(settings_factory(llm_provider="gemini"))

    def test_selected_but_unconfigured_raises(self, settings_factory) -> None:
        with pytest.raises(ConfigurationError, match="not configured"):
            _build_llm_provider(settings_factory(llm_provider="anthropic"))

    def test_openai_selected_without_key_raises_configuration_error(self, settings_factory) -> None:
        with pytest.raises(ConfigurationError, match="'openai' selected but not configured"):
            _build_llm_provider(settings_factory(llm_provider="openai", openai_api_key=""))


class TestBuildPipeline:
    @pytest.mark.asyncio
    async def test_wires_all_components(self, settings_factory, mock_config, tmp_path: Path) -> None:
        settings = settings_factory(file_record_db_path=str(tmp_path / "files.db"))

        components = build_pipeline(settings, mock_config)
        try:
            assert components["settings"] is settings
            assert components["ingestion_config"].class_name == "Text"
            assert isinstance(components["ingestion_service"], IngestionService)
            assert isinstance(components["binary_processor"], BinaryPostProcessor)
            assert isinstance(components["blob_storage"], SupabaseStorageProvider)
            assert components["schema_bootstrapper"].schema.class_name == "Text"
            assert components["provider_registry"] == {
                "llm": True,
                "llm_provider": "openai",
                "vision": True,
                "vector_store": True,
                "storage": True,
                "storage_provider": "supabase-storage",
            }
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_local_storage_backend(self, settings_factory, mock_config, tmp_path: Path) -> None:
        settings = settings_factory(
            anthropic_api_key="sk-ant",
            storage_backend="local",
            local_storage_dir=str(tmp_path / "blobs"),
            file_record_db_path=str(tmp_path / "files.db"),
        )

        components = build_pipeline(settings, mock_config)
        try:
            assert isinstance(components["llm"], AnthropicLLMProvider)
            assert isinstance(components["blob_storage"], LocalStorageProvider)
            assert components["provider_registry"]["llm_provider"] == "anthropic"
            assert components["provider_registry"]["storage_provider"] == "local-storage"
        finally:
            await components["http_client"].aclose()

    def test_missing_credentials_build_nothing(self, settings_factory, mock_config) -> None:
        with pytest.raises(ConfigurationError, match="WEAVIATE_URL"):
            build_pipeline(settings_factory(weaviate_url=""), mock_config)


def test_create_app_registers_routes() -> None:
    paths = create_app().openapi()["paths"]
    assert "/api/v1/ingest/files" in paths
    assert "/api/v1/ingest/binary/process" in paths
    assert "/api/v1/health" in paths
