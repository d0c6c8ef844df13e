"""Supabase Storage provider over the Storage REST API.

Implements :class:`IBlobStorageProvider` with an injected
``httpx.AsyncClient``.  Objects live in one bucket (``uploaded-files`` by
default) and are addressed by slash-separated paths such as
``<owner>/<file name>``.  Uploads send ``x-upsert: true`` so a re-upload of
the same path overwrites the previous object.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx

from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
from ragingest.utils.errors import StorageError
from ragingest.utils.logging import get_logger

_PROVIDER = "supabase-storage"
_DEFAULT_TIMEOUT = 60.0


class SupabaseStorageProvider(IBlobStorageProvider):
    """Blob storage backed by a Supabase Storage bucket."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        supabase_url: str,
        service_key: str,
        bucket: str = "uploaded-files",
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._base_url = supabase_url.rstrip("/")
        self._bucket = bucket
        self._timeout = timeout
        self._auth_headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }
        self._logger = get_logger(__name__)

    def _object_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/{self._bucket}/{quote(path.lstrip('/'))}"

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> str:
        headers = {
            **self._auth_headers,
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "true" if overwrite else "false",
        }
        try:
            response = await self._http.post(
                self._object_url(path),
                content=data,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise StorageError(
                message=f"Upload of '{path}' failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc

        if not response.is_success:
            raise StorageError(
                message=f"Upload of '{path}' rejected ({response.status_code}): {response.text[:300]}",
                provider_name=_PROVIDER,
            )
        self._logger.info("blob_uploaded", path=path, bytes=len(data), bucket=self._bucket)
        return path

    async def download(self, path: str) -> bytes:
        try:
            response = await self._http.get(
                self._object_url(path),
                headers=self._auth_headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise StorageError(
                message=f"Download of '{path}' failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc

        if not response.is_success:
            raise StorageError(
                message=f"Download of '{path}' returned {response.status_code}",
                provider_name=_PROVIDER,
            )
        return response.content

    def get_provider_name(self) -> str:
        return _PROVIDER
