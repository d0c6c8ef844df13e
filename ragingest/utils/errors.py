"""Custom exception hierarchy for ragingest.

All application exceptions inherit from :class:`IngestError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "openai", "weaviate", "supabase-storage") caused the failure.

The hierarchy is organized by pipeline stage:

    IngestError  (base -- catch-all for any ragingest error)
    +-- ConfigurationError  (missing endpoint / credential, bad tunables)
    +-- ParseError          (malformed JSON / JSONL / CSV input)
    +-- ExtractionError     (binary extractor produced no text)
    +-- SchemaError         (vector-store class bootstrap failed)
    +-- BatchUploadError    (a chunk batch was rejected)
    +-- StorageError        (blob upload / download or record store failed)
    +-- VectorStoreError    (single-object insert or other store call failed)
    +-- LLMError            (any LLM API call failure)
    +-- PipelineError       (invalid request to a pipeline)

Fatal errors (configuration, schema, batch upload) surface to the HTTP layer
as a single 500 response.  Recoverable ones (parse errors per line, extraction
and storage errors in the post-processor) are logged and skipped by the
pipelines themselves.
"""


class IngestError(Exception):
    """Base exception for all ragingest errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[weaviate] Failed to create schema: ...``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

class ConfigurationError(IngestError):
    """Raised when required configuration is missing or invalid at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Content errors
# ---------------------------------------------------------------------------

class ParseError(IngestError):
    """Raised when a text file yields no usable items (JSON, JSONL, CSV)."""

    def __init__(
        self,
        message: str = "Failed to parse file content",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(IngestError):
    """Raised when an extractor cannot produce text from a binary file."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Vector store errors
# ---------------------------------------------------------------------------

class SchemaError(IngestError):
    """Raised when the index class cannot be probed or created."""

    def __init__(
        self,
        message: str = "Index schema bootstrap failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BatchUploadError(IngestError):
    """Raised when the vector store rejects a chunk batch.

    Batches sent before the failing one stay committed -- there is no
    compensating delete.
    """

    def __init__(
        self,
        message: str = "Batch upload failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(IngestError):
    """Raised when a vector-store request other than schema bootstrap fails."""

    def __init__(
        self,
        message: str = "Vector store request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class StorageError(IngestError):
    """Raised when blob storage or the file-record store fails."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# LLM / orchestration errors
# ---------------------------------------------------------------------------

class LLMError(IngestError):
    """Raised when an LLM API call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PipelineError(IngestError):
    """Raised when a pipeline is called with an unusable request."""

    def __init__(
        self,
        message: str = "Pipeline request is invalid",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
