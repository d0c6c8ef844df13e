"""Vector-index class definition.

The property list here is the single source of truth for what the
orchestrator writes: :func:`chunk_properties` builds every object from the
same names, so the remote class and the uploaded objects cannot drift apart.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SchemaProperty(BaseModel):
    """One named, typed property of the index class."""

    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    description: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dataType": [self.data_type],
            "description": self.description,
        }


class IndexSchema(BaseModel):
    """Remote class definition: name, vectorizer and ordered property list."""

    model_config = ConfigDict(frozen=True)

    class_name: str
    description: str = ""
    vectorizer: str = "text2vec-openai"
    module_config: dict[str, dict[str, Any]] = Field(default_factory=dict)
    properties: tuple[SchemaProperty, ...] = ()

    @property
    def property_names(self) -> list[str]:
        return [p.name for p in self.properties]

    def to_payload(self) -> dict[str, Any]:
        """Render the class-create request body."""
        return {
            "class": self.class_name,
            "description": self.description,
            "vectorizer": self.vectorizer,
            "moduleConfig": self.module_config,
            "properties": [p.to_payload() for p in self.properties],
        }


CHUNK_PROPERTIES: tuple[SchemaProperty, ...] = (
    SchemaProperty(name="text", data_type="text", description="Chunk text content"),
    SchemaProperty(name="source", data_type="text", description="Source of the text"),
    SchemaProperty(name="blobType", data_type="text", description="Type of blob/content"),
    SchemaProperty(name="loc_lines_from", data_type="number", description="Starting line number"),
    SchemaProperty(name="loc_lines_to", data_type="number", description="Ending line number"),
    SchemaProperty(name="document_name", data_type="text", description="Source filename"),
    SchemaProperty(name="chunk_index", data_type="int", description="Chunk index"),
)


def build_index_schema(
    class_name: str,
    embedding_model: str = "text-embedding-3-large",
    description: str = "Chunks of documents for RAG",
) -> IndexSchema:
    """Return the chunk class definition vectorized by ``text2vec-openai``."""
    return IndexSchema(
        class_name=class_name,
        description=description,
        vectorizer="text2vec-openai",
        module_config={
            "text2vec-openai": {
                "model": embedding_model,
                "type": "text",
            },
        },
        properties=CHUNK_PROPERTIES,
    )


def chunk_properties(
    text: str,
    blob_type: str,
    document_name: str,
    chunk_index: int,
    source: str = "upload",
) -> dict[str, Any]:
    """Build the property dict for one indexed object."""
    return {
        "text": text,
        "source": source,
        "blobType": blob_type,
        "loc_lines_from": chunk_index,
        "loc_lines_to": chunk_index + 1,
        "document_name": document_name,
        "chunk_index": chunk_index,
    }
