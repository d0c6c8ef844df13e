"""Vector store adapters."""

from ragingest.providers.vector_store.weaviate_provider import WeaviateVectorStoreProvider

__all__ = ["WeaviateVectorStoreProvider"]
