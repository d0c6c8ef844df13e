"""Abstract base class for the vector store the pipelines write to.

The store is a pure write sink here: ingestion probes and creates the
index class, then inserts objects.  Embeddings are computed by the store's
own vectorizer module, never by this service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ragingest.models.schema import IndexSchema


# Concrete implementation: WeaviateVectorStoreProvider (ragingest/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the vector store used by ingestion."""

    @abstractmethod
    async def class_exists(self, class_name: str) -> bool:
        """Probe whether *class_name* is defined.

        Returns ``False`` only for a definite "not found".

        Raises
        ------
        ragingest.utils.errors.SchemaError
            For any other failed probe.
        """

    @abstractmethod
    async def create_class(self, schema: IndexSchema) -> bool:
        """Create the class described by *schema*.

        Returns
        -------
        bool
            ``True`` if the class was created, ``False`` if it already
            existed (a concurrent bootstrap won the race).

        Raises
        ------
        ragingest.utils.errors.SchemaError
            If the store rejected the definition.
        """

    @abstractmethod
    async def batch_insert(self, class_name: str, objects: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert a batch of property dicts into *class_name*.

        Returns the store's per-object results.

        Raises
        ------
        ragingest.utils.errors.VectorStoreError
            If the whole batch was rejected.
        """

    @abstractmethod
    async def insert_object(self, class_name: str, properties: dict[str, Any]) -> dict[str, Any]:
        """Insert a single object into *class_name*.

        Raises
        ------
        ragingest.utils.errors.VectorStoreError
            If the insert was rejected.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"weaviate"``."""
