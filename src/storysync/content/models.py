"""Data models for stories read from the content source."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentItem(BaseModel):
    """A single story as delivered by the content source.

    Attributes:
        id: Numeric story identifier used by single-story lookups.
        uuid: Opaque story UUID.
        name: Display name of the story.
        slug: Last path segment of the story.
        full_slug: Full path of the story, used as its URL.
        content: Nested content tree; the root node carries a ``component`` tag.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    uuid: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    full_slug: Optional[str] = None
    content: Optional[Dict[str, Any]] = None

    @property
    def component(self) -> Optional[str]:
        """Return the root content node's component tag, if any."""
        if not self.content:
            return None
        value = self.content.get("component")
        return value if isinstance(value, str) else None


class ContentPage(BaseModel):
    """One page of a paginated story listing.

    Attributes:
        items: Stories on this page, in upstream order.
        page: 1-based page number.
        per_page: Page size the listing was requested with.
        total: Total number of stories across all pages.
    """

    items: List[ContentItem] = Field(default_factory=list)
    page: int = 1
    per_page: int = Field(ge=1)
    total: int = 0


__all__ = ["ContentItem", "ContentPage"]
