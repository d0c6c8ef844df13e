"""Idempotent creation of the vector-index class.

Probes for the class and creates it when the probe says "not found".  A
successful probe is a no-op: the existing class is assumed to be correct
and is never diffed against the desired definition.  A create answered
with "already exists" (another process won the race) counts as success.

The outcome is cached per process.  An :class:`asyncio.Lock` makes
concurrent callers wait for the first bootstrap instead of racing it.
"""

from __future__ import annotations

import asyncio

import structlog

from ragingest.interfaces.vector_store_provider import IVectorStoreProvider
from ragingest.models.schema import IndexSchema
from ragingest.utils.errors import SchemaError, VectorStoreError

logger = structlog.get_logger(logger_name=__name__)


class SchemaBootstrapper:
    """Ensures :attr:`schema` exists in the vector store before any write."""

    def __init__(self, vector_store: IVectorStoreProvider, schema: IndexSchema) -> None:
        self._vector_store = vector_store
        self._schema = schema
        self._lock = asyncio.Lock()
        self._ensured = False

    @property
    def schema(self) -> IndexSchema:
        return self._schema

    @property
    def is_ensured(self) -> bool:
        return self._ensured

    async def ensure_schema(self) -> None:
        """Probe for the class and create it if absent.

        Raises
        ------
        SchemaError
            If the probe fails with anything other than "not found", or
            the store rejects the class definition.
        """
        if self._ensured:
            return

        async with self._lock:
            if self._ensured:
                return

            class_name = self._schema.class_name
            try:
                exists = await self._vector_store.class_exists(class_name)
                if exists:
                    logger.info("schema_class_exists", class_name=class_name)
                else:
                    logger.info("schema_class_creating", class_name=class_name)
                    created = await self._vector_store.create_class(self._schema)
                    logger.info(
                        "schema_class_ready",
                        class_name=class_name,
                        created=created,
                        properties=self._schema.property_names,
                    )
            except VectorStoreError as exc:
                raise SchemaError(
                    message=f"Schema bootstrap for '{class_name}' failed: {exc.message}",
                    provider_name=exc.provider_name,
                ) from exc

            self._ensured = True

    def reset(self) -> None:
        """Forget the cached outcome so the next call probes again."""
        self._ensured = False
