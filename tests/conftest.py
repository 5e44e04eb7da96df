"""Shared fakes for the content source and index writer."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Optional

import pytest

from storysync.content import ContentItem, ContentPage
from storysync.errors import IndexWriteError, UpstreamFetchError
from storysync.solr import ClearCommand, WriteResult


def make_story(story_id: Any, *, component: Optional[str] = "page", text: str = "") -> dict:
    """Return a minimal Storyblok story payload.

    Args:
        story_id: Story identifier.
        component: Root component tag, or ``None`` to omit it.
        text: Text placed in a single body block.

    Returns:
        dict: Story mapping as decoded from the Delivery API.
    """
    content: dict[str, Any] = {"body": [{"component": "text_block", "text": text}]}
    if component is not None:
        content["component"] = component
    return {
        "id": story_id,
        "name": f"Story {story_id}",
        "full_slug": f"stories/{story_id}",
        "content": content,
    }


class FakeContentSource:
    """In-memory content source recording every call."""

    def __init__(
        self,
        stories: Iterable[dict],
        *,
        per_page: int = 100,
        total: Optional[int] = None,
        fail_pages: Iterable[int] = (),
        slow_pages: Iterable[int] = (),
    ) -> None:
        self.stories = [ContentItem.model_validate(story) for story in stories]
        self.per_page = per_page
        self.total = len(self.stories) if total is None else total
        self.fail_pages = set(fail_pages)
        self.slow_pages = set(slow_pages)
        self.page_calls: list[int] = []
        self.id_calls: list[Any] = []
        self.cancelled_pages: list[int] = []

    async def fetch_page(self, page: int) -> ContentPage:
        self.page_calls.append(page)
        if page in self.slow_pages:
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                self.cancelled_pages.append(page)
                raise
        await asyncio.sleep(0)
        if page in self.fail_pages:
            raise UpstreamFetchError(f"page {page} unavailable", status_code=502)
        start = (page - 1) * self.per_page
        items = self.stories[start : start + self.per_page]
        return ContentPage(items=items, page=page, per_page=self.per_page, total=self.total)

    async def fetch_by_id(self, story_id: Any) -> Optional[ContentItem]:
        self.id_calls.append(story_id)
        for story in self.stories:
            if str(story.id) == str(story_id):
                return story
        return None


class FakeIndexWriter:
    """In-memory index writer recording every submitted payload."""

    def __init__(self, *, fail_status: Optional[int] = None) -> None:
        self.fail_status = fail_status
        self.payloads: list[Any] = []

    async def submit(self, payload: Any) -> WriteResult:
        self.payloads.append(payload)
        if self.fail_status is not None:
            raise IndexWriteError("write rejected", status_code=self.fail_status)
        return WriteResult(status_code=200, body={"responseHeader": {"status": 0}})

    async def clear(self) -> WriteResult:
        return await self.submit(ClearCommand())


@pytest.fixture
def writer() -> FakeIndexWriter:
    return FakeIndexWriter()
