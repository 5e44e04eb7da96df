"""Wiring of the content source, index writer and sync components."""

from __future__ import annotations

from typing import Any, Mapping, Union

from storysync.config import SyncConfig, require_connection_settings
from storysync.content import ContentItem, ContentSource, StoryblokClient, StoryId
from storysync.indexing import (
    ChangeDispatcher,
    ChangeNotification,
    DispatchOutcome,
    DocumentMapper,
    IndexDocument,
    ReindexCoordinator,
    ReindexSummary,
)
from storysync.solr import IndexWriter, SolrClient, WriteResult


class SyncService:
    """High-level entry point bundling every component needed to sync the index."""

    def __init__(
        self,
        source: ContentSource,
        writer: IndexWriter,
        *,
        mapper: DocumentMapper | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            source: Content source used for listings and single-story lookups.
            writer: Index writer receiving documents and commands.
            mapper: Optional document mapper override.
        """
        self.source = source
        self.writer = writer
        self.mapper = mapper or DocumentMapper()
        self.coordinator = ReindexCoordinator(source, writer, self.mapper)
        self.dispatcher = ChangeDispatcher(
            source, writer, mapper=self.mapper, coordinator=self.coordinator
        )

    @classmethod
    def from_config(cls, config: SyncConfig) -> "SyncService":
        """Build a service talking to Storyblok and Solr as configured.

        Raises:
            ConfigError: If required connection settings are missing.
        """
        require_connection_settings(config)
        timeout = config.http.timeout_seconds
        return cls(
            StoryblokClient(config.storyblok, timeout=timeout),
            SolrClient(config.solr, timeout=timeout),
        )

    async def reindex(self, *, clear: bool = False) -> ReindexSummary:
        """Run a full reindex, optionally clearing the index first."""
        if clear:
            await self.coordinator.clear_index()
        return await self.coordinator.reindex_all()

    async def clear(self) -> WriteResult:
        """Delete every document from the index."""
        return await self.coordinator.clear_index()

    async def dispatch(
        self, notification: Union[ChangeNotification, Mapping[str, Any]]
    ) -> DispatchOutcome:
        """Apply one change notification; never raises."""
        return await self.dispatcher.dispatch(notification)

    async def preview(self, story_id: StoryId) -> IndexDocument | None:
        """Return the document a story would be indexed as, without writing it."""
        story: ContentItem | None = await self.source.fetch_by_id(story_id)
        if story is None:
            return None
        return self.mapper.map(story)

    async def aclose(self) -> None:
        """Close HTTP clients held by the source and writer."""
        for component in (self.source, self.writer):
            closer = getattr(component, "aclose", None)
            if closer is not None:
                await closer()

    async def __aenter__(self) -> "SyncService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["SyncService"]
