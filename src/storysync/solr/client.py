"""Authenticated batch writes against a Solr core."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Protocol, Sequence, Union

import httpx

from storysync.config.models import SolrSettings
from storysync.errors import IndexWriteError
from storysync.indexing.models import IndexDocument

from .models import ClearCommand, DeleteCommand, WriteResult

LOGGER = logging.getLogger(__name__)

UpdatePayload = Union[Sequence[IndexDocument], DeleteCommand, ClearCommand]


class IndexWriter(Protocol):
    """Interface the indexer needs from the search engine."""

    async def submit(self, payload: UpdatePayload) -> WriteResult: ...

    async def clear(self) -> WriteResult: ...


def build_update_url(settings: SolrSettings) -> str:
    """Return the committing update endpoint for the configured core.

    Args:
        settings: Solr connection settings.

    Returns:
        str: URL of the form ``scheme://host/path/core/update?commit=true``.
    """
    scheme = "https" if settings.port == 443 else "http"
    return f"{scheme}://{settings.host}/{settings.path}/{settings.core}/update?commit=true"


def basic_auth_header(user: str, password: str) -> str:
    """Return an HTTP Basic ``Authorization`` header value."""
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def serialize_payload(payload: UpdatePayload) -> Any:
    """Return the JSON-ready body for an update payload."""
    if isinstance(payload, (DeleteCommand, ClearCommand)):
        return payload.to_payload()
    return [document.to_payload() for document in payload]


class SolrClient:
    """Submit document batches and delete commands to Solr.

    Every call is a single committing request; failures are raised, never
    retried.
    """

    def __init__(
        self,
        settings: SolrSettings,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._url = build_update_url(settings)
        self._headers = {
            "Authorization": basic_auth_header(settings.user, settings.password),
            "content-type": "application/json;charset=UTF-8",
        }
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def url(self) -> str:
        """Return the update endpoint URL."""
        return self._url

    async def submit(self, payload: UpdatePayload) -> WriteResult:
        """Send one update request and commit it.

        Args:
            payload: Documents to upsert, or a delete/clear command.

        Returns:
            WriteResult: Status and decoded body of the response.

        Raises:
            IndexWriteError: If the request fails or Solr answers with a non-2xx status.
        """
        body = serialize_payload(payload)
        LOGGER.debug("Solr request data added/updated/deleted: %s", body)
        try:
            response = await self._client.post(
                self._url,
                content=json.dumps(body).encode("utf-8"),
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            LOGGER.error("Solr request to %s failed: %s", self._url, exc)
            raise IndexWriteError(f"Solr request failed: {exc}") from exc

        if not response.is_success:
            LOGGER.error(
                "Solr rejected update with status %s: %s (payload: %s)",
                response.status_code,
                response.text,
                body,
            )
            raise IndexWriteError(
                f"Solr HTTP error {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            decoded = response.json()
        except ValueError as exc:
            raise IndexWriteError(
                f"Solr returned a non-JSON body: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        LOGGER.info("Solr added/updated/deleted: %s", _describe(payload))
        return WriteResult(status_code=response.status_code, body=decoded)

    async def upsert(self, documents: Sequence[IndexDocument]) -> WriteResult:
        """Add or replace ``documents`` in one batch."""
        return await self.submit(list(documents))

    async def delete(self, document_id: str) -> WriteResult:
        """Delete the document with ``document_id``."""
        return await self.submit(DeleteCommand(id=document_id))

    async def clear(self) -> WriteResult:
        """Delete every document in the core."""
        return await self.submit(ClearCommand())

    async def aclose(self) -> None:
        """Close the underlying HTTP client when owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SolrClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _describe(payload: UpdatePayload) -> str:
    if isinstance(payload, DeleteCommand):
        return f"delete id={payload.id}"
    if isinstance(payload, ClearCommand):
        return f"delete query={payload.query}"
    return f"{len(payload)} document(s)"


__all__ = [
    "IndexWriter",
    "SolrClient",
    "UpdatePayload",
    "basic_auth_header",
    "build_update_url",
    "serialize_payload",
]
