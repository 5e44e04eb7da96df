"""Index document and change notification models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

APP_KEY = "StoryblokSolrIndexer"


class IndexDocument(BaseModel):
    """Flat record written to the search index for one story.

    Attributes:
        id: Stable story identifier; re-indexing the same story overwrites it.
        type: Root component tag of the story's content, when present.
        app_key: Producer identifier, serialized as ``appKey``.
        url: Full slug of the story.
        title: Display name of the story.
        content: All extracted text values joined by single spaces.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    type: Optional[str] = None
    app_key: str = Field(default=APP_KEY, alias="appKey")
    url: Optional[str] = None
    title: Optional[str] = None
    content: str = ""

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-ready mapping sent to the search engine."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChangeNotification(BaseModel):
    """Webhook payload describing a story lifecycle change.

    Fields are left untyped so a malformed value never rejects the whole
    notification; the dispatcher decides which values are usable.

    Attributes:
        action: Lifecycle action such as ``published`` or ``deleted``.
        story_id: Identifier of the affected story.
    """

    model_config = ConfigDict(extra="allow")

    action: Any = None
    story_id: Any = None


class DispatchOutcome(str, Enum):
    """Result of handling one change notification."""

    UPSERTED = "upserted"
    DELETED = "deleted"
    REINDEXED = "reindexed"
    SKIPPED = "skipped"
    FAILED = "failed"


__all__ = ["APP_KEY", "IndexDocument", "ChangeNotification", "DispatchOutcome"]
