"""Local-directory blob storage for development and tests.

Stores objects as plain files under a root directory, mirroring the
slash-separated object paths used by the remote store.  File I/O runs in
a worker thread via ``asyncio.to_thread`` so the event loop never blocks.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
from ragingest.utils.errors import StorageError
from ragingest.utils.logging import get_logger

_PROVIDER = "local-storage"


class LocalStorageProvider(IBlobStorageProvider):
    """Blob storage rooted at a local directory."""

    def __init__(self, root_dir: str | Path = "data/blobs") -> None:
        self._root = Path(root_dir).resolve()
        self._logger = get_logger(__name__)

    def _resolve(self, path: str) -> Path:
        target = (self._root / path.lstrip("/")).resolve()
        if target != self._root and self._root not in target.parents:
            raise StorageError(
                message=f"Path '{path}' escapes the storage root",
                provider_name=_PROVIDER,
            )
        return target

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> str:
        target = self._resolve(path)
        if target.exists() and not overwrite:
            raise StorageError(
                message=f"Object '{path}' already exists",
                provider_name=_PROVIDER,
            )

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageError(
                message=f"Upload of '{path}' failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc

        self._logger.info("blob_uploaded", path=path, bytes=len(data), root=str(self._root))
        return path

    async def download(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError as exc:
            raise StorageError(
                message=f"Object '{path}' not found",
                provider_name=_PROVIDER,
            ) from exc
        except OSError as exc:
            raise StorageError(
                message=f"Download of '{path}' failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc

    def get_provider_name(self) -> str:
        return _PROVIDER
