"""Unit tests for SchemaBootstrapper: idempotent index-class creation."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from ragingest.models.schema import CHUNK_PROPERTIES, IndexSchema, build_index_schema
from ragingest.services.ingestion.schema_bootstrapper import SchemaBootstrapper
from ragingest.utils.errors import SchemaError, VectorStoreError


class TestIndexSchema:
    def test_payload_lists_declared_properties(self) -> None:
        payload = build_index_schema("Text", embedding_model="text-embedding-3-small").to_payload()

        assert payload["class"] == "Text"
        assert payload["vectorizer"] == "text2vec-openai"
        assert payload["moduleConfig"]["text2vec-openai"] == {
            "model": "text-embedding-3-small",
            "type": "text",
        }
        assert [p["name"] for p in payload["properties"]] == [
            "text",
            "source",
            "blobType",
            "loc_lines_from",
            "loc_lines_to",
            "document_name",
            "chunk_index",
        ]
        assert payload["properties"][6]["dataType"] == ["int"]


class TestSchemaBootstrapper:
    @pytest.mark.asyncio
    async def test_absent_class_is_created_once(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        mock_vector_store.class_exists = AsyncMock(return_value=False)
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        await bootstrapper.ensure_schema()

        mock_vector_store.create_class.assert_awaited_once_with(index_schema)
        created = mock_vector_store.create_class.call_args.args[0]
        assert created.properties == CHUNK_PROPERTIES
        assert bootstrapper.is_ensured is True

    @pytest.mark.asyncio
    async def test_existing_class_is_never_created(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        await bootstrapper.ensure_schema()

        mock_vector_store.class_exists.assert_awaited_once_with("Text")
        mock_vector_store.create_class.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_outcome_is_cached(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        await bootstrapper.ensure_schema()
        await bootstrapper.ensure_schema()

        assert mock_vector_store.class_exists.await_count == 1

    @pytest.mark.asyncio
    async def test_reset_probes_again(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        await bootstrapper.ensure_schema()
        bootstrapper.reset()
        await bootstrapper.ensure_schema()

        assert mock_vector_store.class_exists.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_bootstrap(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        async def _slow_probe(class_name: str) -> bool:
            await asyncio.sleep(0.01)
            return False

        mock_vector_store.class_exists = AsyncMock(side_effect=_slow_probe)
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        await asyncio.gather(*(bootstrapper.ensure_schema() for _ in range(5)))

        assert mock_vector_store.class_exists.await_count == 1
        assert mock_vector_store.create_class.await_count == 1

    @pytest.mark.asyncio
    async def test_create_race_counts_as_success(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        mock_vector_store.class_exists = AsyncMock(return_value=False)
        mock_vector_store.create_class = AsyncMock(return_value=False)
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        await bootstrapper.ensure_schema()

        assert bootstrapper.is_ensured is True

    @pytest.mark.asyncio
    async def test_probe_failure_raises_schema_error(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        mock_vector_store.class_exists = AsyncMock(
            side_effect=SchemaError("probe returned 500", provider_name="weaviate")
        )
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        with pytest.raises(SchemaError) as exc_info:
            await bootstrapper.ensure_schema()

        assert "probe returned 500" in exc_info.value.message
        assert exc_info.value.provider_name == "weaviate"
        assert bootstrapper.is_ensured is False

    @pytest.mark.asyncio
    async def test_vector_store_error_is_wrapped(
        self, mock_vector_store: MagicMock, index_schema: IndexSchema
    ) -> None:
        mock_vector_store.class_exists = AsyncMock(return_value=False)
        mock_vector_store.create_class = AsyncMock(side_effect=VectorStoreError("rejected"))
        bootstrapper = SchemaBootstrapper(mock_vector_store, index_schema)

        with pytest.raises(SchemaError, match="rejected"):
            await bootstrapper.ensure_schema()
