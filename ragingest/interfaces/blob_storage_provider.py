"""Abstract base class for blob storage of uploaded binaries and sidecars."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: SupabaseStorageProvider, LocalStorageProvider
# Located in: ragingest/providers/storage/
class IBlobStorageProvider(ABC):
    """Contract for durable byte storage addressed by slash-separated paths."""

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> str:
        """Store *data* at *path* and return the stored path.

        Raises
        ------
        ragingest.utils.errors.StorageError
            If the upload fails, or *path* exists and ``overwrite`` is False.
        """

    @abstractmethod
    async def download(self, path: str) -> bytes:
        """Return the bytes stored at *path*.

        Raises
        ------
        ragingest.utils.errors.StorageError
            If the object is missing or the download fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"supabase-storage"``."""
