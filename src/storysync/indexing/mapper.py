"""Conversion of stories into index documents."""

from __future__ import annotations

from storysync.content.models import ContentItem
from storysync.errors import InvalidDocumentError

from .models import APP_KEY, IndexDocument
from .text import find_text_values


def map_story(item: ContentItem, *, app_key: str = APP_KEY) -> IndexDocument:
    """Build the index document for a story.

    Args:
        item: Story fetched from the content source.
        app_key: Producer identifier stamped on the document.

    Returns:
        IndexDocument: Document ready to be written to the index.

    Raises:
        InvalidDocumentError: If the story has no identifier.
    """
    if item.id is None or item.id == "":
        raise InvalidDocumentError(
            f"Story {item.full_slug or item.name or '<unknown>'} has no id; cannot index it."
        )

    return IndexDocument(
        id=str(item.id),
        type=item.component,
        app_key=app_key,
        url=item.full_slug,
        title=item.name,
        content=" ".join(find_text_values(item.content)),
    )


class DocumentMapper:
    """Callable wrapper around :func:`map_story` with a fixed producer key."""

    def __init__(self, app_key: str = APP_KEY) -> None:
        self.app_key = app_key

    def map(self, item: ContentItem) -> IndexDocument:
        """Return the index document for ``item``."""
        return map_story(item, app_key=self.app_key)

    __call__ = map


__all__ = ["DocumentMapper", "map_story"]
