"""Abstract base class for the uploaded-file tracking store."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragingest.models.ingest import UploadedFileRecord


# Concrete implementation: SQLiteFileRecordProvider (ragingest/providers/records/)
class IFileRecordProvider(ABC):
    """Contract for persisting :class:`UploadedFileRecord` rows.

    The ingestion core only creates rows, reads them by id, and flips
    ``rag_processed`` to ``True``.  Deletion belongs to other services.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create backing tables if needed."""

    @abstractmethod
    async def insert(
        self,
        owner_id: str | None,
        file_name: str,
        mime_type: str,
        byte_size: int,
        storage_path: str,
    ) -> UploadedFileRecord:
        """Insert a new unprocessed binary record and return it.

        Raises
        ------
        ragingest.utils.errors.StorageError
            If the insert fails.
        """

    @abstractmethod
    async def get(self, file_id: str) -> UploadedFileRecord | None:
        """Return the record with *file_id*, or ``None`` if absent."""

    @abstractmethod
    async def mark_processed(self, file_id: str) -> None:
        """Set ``rag_processed`` to ``True``.  Never sets it back."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"sqlite-records"``."""
