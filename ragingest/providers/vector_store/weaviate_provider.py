"""Weaviate vector store provider over the REST API.

Implements :class:`IVectorStoreProvider` with an injected
``httpx.AsyncClient``.  Every request carries the Weaviate API key as a
Bearer token plus ``X-OpenAI-Api-Key``, which the ``text2vec-openai``
vectorizer module uses to embed objects on write.

Endpoints used:
    GET  /v1/schema/{class}   existence probe (404 = absent)
    POST /v1/schema           class creation
    POST /v1/batch/objects    batch insert
    POST /v1/objects          single insert
"""

from __future__ import annotations

from typing import Any

import httpx

from ragingest.interfaces.vector_store_provider import IVectorStoreProvider
from ragingest.models.schema import IndexSchema
from ragingest.utils.errors import SchemaError, VectorStoreError
from ragingest.utils.logging import get_logger

_PROVIDER = "weaviate"
_DEFAULT_TIMEOUT = 60.0


def normalize_base_url(url: str) -> str:
    """Prefix a bare host with ``https://`` and drop any trailing slash."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


def _body_text(response: httpx.Response, limit: int = 500) -> str:
    try:
        return response.text[:limit]
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return ""


class WeaviateVectorStoreProvider(IVectorStoreProvider):
    """Weaviate REST adapter.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    base_url:
        Weaviate cluster URL; a bare host name is accepted.
    api_key:
        Weaviate API key, sent as a Bearer token.
    openai_api_key:
        Forwarded as ``X-OpenAI-Api-Key`` for the vectorizer module.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        openai_api_key: str = "",
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._base_url = normalize_base_url(base_url)
        self._timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if openai_api_key:
            self._headers["X-OpenAI-Api-Key"] = openai_api_key
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, translating transport failures to ``VectorStoreError``."""
        url = f"{self._base_url}{path}"
        try:
            return await self._http.request(
                method,
                url,
                json=json_body,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise VectorStoreError(
                message=f"{method} {path} failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc

    # -- IVectorStoreProvider --------------------------------------------------

    async def class_exists(self, class_name: str) -> bool:
        try:
            response = await self._request("GET", f"/v1/schema/{class_name}")
        except VectorStoreError as exc:
            raise SchemaError(message=exc.message, provider_name=_PROVIDER) from exc

        if response.status_code == 404:
            return False
        if response.is_success:
            return True
        raise SchemaError(
            message=(
                f"Schema probe for '{class_name}' returned "
                f"{response.status_code}: {_body_text(response)}"
            ),
            provider_name=_PROVIDER,
        )

    async def create_class(self, schema: IndexSchema) -> bool:
        try:
            response = await self._request("POST", "/v1/schema", schema.to_payload())
        except VectorStoreError as exc:
            raise SchemaError(message=exc.message, provider_name=_PROVIDER) from exc

        if response.is_success:
            self._logger.info("weaviate_class_created", class_name=schema.class_name)
            return True

        body = _body_text(response)
        # A concurrent bootstrap may have created the class between probe and create.
        if response.status_code == 409 or (
            response.status_code == 422 and "already exists" in body.lower()
        ):
            self._logger.info("weaviate_class_already_exists", class_name=schema.class_name)
            return False

        raise SchemaError(
            message=(
                f"Failed to create class '{schema.class_name}' "
                f"({response.status_code}): {body}"
            ),
            provider_name=_PROVIDER,
        )

    async def batch_insert(
        self,
        class_name: str,
        objects: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        payload = {
            "objects": [{"class": class_name, "properties": props} for props in objects],
        }
        response = await self._request("POST", "/v1/batch/objects", payload)
        if not response.is_success:
            raise VectorStoreError(
                message=(
                    f"Batch insert of {len(objects)} objects rejected "
                    f"({response.status_code}): {_body_text(response)}"
                ),
                provider_name=_PROVIDER,
            )

        try:
            results = response.json()
        except ValueError:
            results = []
        if not isinstance(results, list):
            results = []

        # Per-object errors do not fail the batch; they are only reported.
        object_errors = [
            r.get("result", {}).get("errors")
            for r in results
            if isinstance(r, dict) and isinstance(r.get("result"), dict) and r["result"].get("errors")
        ]
        if object_errors:
            self._logger.warning(
                "weaviate_batch_object_errors",
                class_name=class_name,
                failed_objects=len(object_errors),
                first_error=str(object_errors[0])[:300],
            )
        self._logger.debug(
            "weaviate_batch_inserted",
            class_name=class_name,
            objects=len(objects),
        )
        return results

    async def insert_object(
        self,
        class_name: str,
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        response = await self._request(
            "POST",
            "/v1/objects",
            {"class": class_name, "properties": properties},
        )
        if not response.is_success:
            raise VectorStoreError(
                message=(
                    f"Object insert into '{class_name}' rejected "
                    f"({response.status_code}): {_body_text(response)}"
                ),
                provider_name=_PROVIDER,
            )
        try:
            body = response.json()
        except ValueError:
            body = {}
        return body if isinstance(body, dict) else {}

    def get_provider_name(self) -> str:
        return _PROVIDER
