"""Read-only client for the Storyblok Content Delivery API."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Union

import httpx
from pydantic import ValidationError

from storysync.config.models import StoryblokSettings
from storysync.errors import UpstreamFetchError

from .models import ContentItem, ContentPage

LOGGER = logging.getLogger(__name__)

StoryId = Union[int, str]


class ContentSource(Protocol):
    """Interface the indexer needs from the content source."""

    async def fetch_page(self, page: int) -> ContentPage: ...

    async def fetch_by_id(self, story_id: StoryId) -> Optional[ContentItem]: ...


class StoryblokClient:
    """Fetch stories from Storyblok over HTTP.

    The client owns its ``httpx.AsyncClient`` unless one is passed in, in which
    case closing is left to the caller.
    """

    def __init__(
        self,
        settings: StoryblokSettings,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def per_page(self) -> int:
        """Return the configured page size."""
        return self._settings.per_page

    async def fetch_page(self, page: int) -> ContentPage:
        """Fetch one page of the story listing.

        Args:
            page: 1-based page number.

        Returns:
            ContentPage: Stories on the page and the listing's total count.

        Raises:
            UpstreamFetchError: If the request fails or the response is malformed.
        """
        params = self._listing_params(page)
        response = await self._get("cdn/stories", params)
        payload = self._decode(response)

        stories = payload.get("stories")
        if not isinstance(stories, list):
            raise UpstreamFetchError(
                f"Story listing page {page} has no 'stories' array.",
                status_code=response.status_code,
            )

        try:
            items = [ContentItem.model_validate(story) for story in stories]
        except ValidationError as exc:
            raise UpstreamFetchError(f"Invalid story on page {page}: {exc}") from exc

        total_header = response.headers.get("total")
        try:
            total = int(total_header) if total_header is not None else len(items)
        except ValueError as exc:
            raise UpstreamFetchError(f"Invalid 'total' header: {total_header!r}") from exc

        return ContentPage(items=items, page=page, per_page=self._settings.per_page, total=total)

    async def fetch_by_id(self, story_id: StoryId) -> Optional[ContentItem]:
        """Fetch a single story by its identifier.

        Args:
            story_id: Numeric story identifier.

        Returns:
            Optional[ContentItem]: The story, or ``None`` when the response carries none.

        Raises:
            UpstreamFetchError: If the request fails or the response is malformed.
        """
        params = {"token": self._settings.access_token or "", "version": self._settings.version}
        response = await self._get(f"cdn/stories/{story_id}", params)
        story = self._decode(response).get("story")
        if not story:
            return None
        try:
            return ContentItem.model_validate(story)
        except ValidationError as exc:
            raise UpstreamFetchError(f"Invalid story {story_id}: {exc}") from exc

    async def aclose(self) -> None:
        """Close the underlying HTTP client when owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "StoryblokClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _listing_params(self, page: int) -> dict[str, Any]:
        params: dict[str, Any] = {
            "token": self._settings.access_token or "",
            "version": self._settings.version,
            "per_page": self._settings.per_page,
            "page": page,
            "starts_with": self._settings.starts_with,
        }
        if self._settings.components:
            params["filter_query[component][in]"] = ",".join(self._settings.components)
        return params

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        url = f"{self._settings.base_url.rstrip('/')}/{path}"
        LOGGER.debug("GET %s page=%s", url, params.get("page"))
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(f"Request to {url} failed: {exc}") from exc

        if not response.is_success:
            raise UpstreamFetchError(
                f"Storyblok API error {response.status_code} for {path}: {response.text}",
                status_code=response.status_code,
            )
        return response

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamFetchError(
                f"Storyblok returned a non-JSON body: {exc}", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamFetchError(
                "Storyblok returned an unexpected payload.", status_code=response.status_code
            )
        return payload


__all__ = ["ContentSource", "StoryblokClient", "StoryId"]
