"""Utility modules for ragingest.

- **errors** -- Domain exception hierarchy rooted at IngestError; each
  pipeline stage raises its own subclass so callers can tell fatal failures
  from skip-and-continue ones.
- **logging** -- structlog setup: coloured console output in development,
  structured JSON in production.
- **concurrency** -- semaphore-bounded ``asyncio.gather`` used to fan out
  per-file work.
"""

from ragingest.utils.concurrency import throttled_gather
from ragingest.utils.errors import (
    BatchUploadError,
    ConfigurationError,
    ExtractionError,
    IngestError,
    LLMError,
    ParseError,
    PipelineError,
    SchemaError,
    StorageError,
    VectorStoreError,
)
from ragingest.utils.logging import configure_logging, get_logger

__all__ = [
    "BatchUploadError",
    "ConfigurationError",
    "ExtractionError",
    "IngestError",
    "LLMError",
    "ParseError",
    "PipelineError",
    "SchemaError",
    "StorageError",
    "VectorStoreError",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
