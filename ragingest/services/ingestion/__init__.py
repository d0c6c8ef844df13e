"""Document ingestion pipelines.

Two entry points share one vector-index class:

1. **IngestionService** (ingestion_service.py) -- upload time.  Text files
   are parsed (parsers.py), enriched with LLM metadata
   (metadata_enricher.py), chunked (chunker.py) and batch-uploaded.  Binary
   files are stored in blob storage with a pending file record.

2. **BinaryPostProcessor** (binary_processor.py) -- on demand.  Stored
   binaries are downloaded, run through a MIME-selected extractor
   (extractors/), saved as a ``.txt`` sidecar and indexed as one object.

Both run the SchemaBootstrapper (schema_bootstrapper.py) before writing.
"""

from ragingest.services.ingestion.binary_processor import BinaryPostProcessor
from ragingest.services.ingestion.chunker import TextChunker
from ragingest.services.ingestion.ingestion_service import IngestionService
from ragingest.services.ingestion.metadata_enricher import MetadataEnricher
from ragingest.services.ingestion.schema_bootstrapper import SchemaBootstrapper

__all__ = [
    "BinaryPostProcessor",
    "IngestionService",
    "MetadataEnricher",
    "SchemaBootstrapper",
    "TextChunker",
]
