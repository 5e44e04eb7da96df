"""Routing of story change notifications to index operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from storysync.errors import SyncError
from storysync.solr.models import DeleteCommand

from .mapper import DocumentMapper
from .models import ChangeNotification, DispatchOutcome
from .reindex import ReindexCoordinator

if TYPE_CHECKING:
    from storysync.content.client import ContentSource, StoryId
    from storysync.solr.client import IndexWriter

LOGGER = logging.getLogger(__name__)

UPSERT_ACTIONS = frozenset({"published", "moved"})
DELETE_ACTIONS = frozenset({"unpublished", "deleted"})


class ChangeDispatcher:
    """Apply one change notification to the index.

    ``published`` and ``moved`` re-index the single story, ``unpublished`` and
    ``deleted`` remove it, and anything else clears the index and rebuilds it
    from scratch. :meth:`dispatch` never raises; failures are logged and
    reported as :attr:`DispatchOutcome.FAILED`.
    """

    def __init__(
        self,
        source: "ContentSource",
        writer: "IndexWriter",
        *,
        mapper: DocumentMapper | None = None,
        coordinator: ReindexCoordinator | None = None,
    ) -> None:
        self._source = source
        self._writer = writer
        self._mapper = mapper or DocumentMapper()
        self._coordinator = coordinator or ReindexCoordinator(source, writer, self._mapper)

    async def dispatch(
        self, notification: Union[ChangeNotification, Mapping[str, Any]]
    ) -> DispatchOutcome:
        """Handle a change notification.

        Args:
            notification: Parsed notification or the raw webhook mapping.

        Returns:
            DispatchOutcome: What was done for the notification.
        """
        parsed = self._parse(notification)
        try:
            return await self._route(parsed)
        except SyncError as exc:
            LOGGER.error(
                "Error processing index action %r for story %r: %s (payload: %r)",
                parsed.action,
                parsed.story_id,
                exc,
                parsed.model_dump(),
            )
        except Exception:
            LOGGER.exception(
                "Unexpected error processing index action %r (payload: %r)",
                parsed.action,
                parsed.model_dump(),
            )
        return DispatchOutcome.FAILED

    async def _route(self, notification: ChangeNotification) -> DispatchOutcome:
        action = notification.action
        if isinstance(action, str) and action in UPSERT_ACTIONS:
            return await self._upsert_story(notification)
        if isinstance(action, str) and action in DELETE_ACTIONS:
            return await self._delete_story(notification)

        LOGGER.warning(
            "Unrecognised action %r; clearing the index and running a full reindex.", action
        )
        await self._coordinator.clear_index()
        summary = await self._coordinator.reindex_all()
        LOGGER.info("Full reindex wrote %d document(s).", summary.documents)
        return DispatchOutcome.REINDEXED

    async def _upsert_story(self, notification: ChangeNotification) -> DispatchOutcome:
        story_id = _usable_story_id(notification)
        if story_id is None:
            LOGGER.warning(
                "Ignoring %r notification without a usable story_id: %r",
                notification.action,
                notification.story_id,
            )
            return DispatchOutcome.SKIPPED

        story = await self._source.fetch_by_id(story_id)
        if story is None:
            LOGGER.warning("Story %r not found; nothing to index.", story_id)
            return DispatchOutcome.SKIPPED

        document = self._mapper.map(story)
        await self._writer.submit([document])
        return DispatchOutcome.UPSERTED

    async def _delete_story(self, notification: ChangeNotification) -> DispatchOutcome:
        story_id = _usable_story_id(notification)
        if story_id is None:
            LOGGER.warning(
                "Ignoring %r notification without a usable story_id: %r",
                notification.action,
                notification.story_id,
            )
            return DispatchOutcome.SKIPPED

        await self._writer.submit(DeleteCommand(id=str(story_id)))
        return DispatchOutcome.DELETED

    @staticmethod
    def _parse(
        notification: Union[ChangeNotification, Mapping[str, Any]],
    ) -> ChangeNotification:
        if isinstance(notification, ChangeNotification):
            return notification
        return ChangeNotification.model_validate(dict(notification))


def _usable_story_id(notification: ChangeNotification) -> Optional["StoryId"]:
    """Return the story id when it is a non-empty string or an integer."""
    story_id = notification.story_id
    if isinstance(story_id, bool):
        return None
    if isinstance(story_id, int):
        return story_id
    if isinstance(story_id, str) and story_id.strip():
        return story_id
    return None


__all__ = ["ChangeDispatcher", "UPSERT_ACTIONS", "DELETE_ACTIONS"]
