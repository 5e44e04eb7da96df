"""Full reindex of every story in the content source."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from storysync.content.models import ContentPage

from .mapper import DocumentMapper
from .models import IndexDocument

if TYPE_CHECKING:
    from storysync.content.client import ContentSource
    from storysync.solr.client import IndexWriter
    from storysync.solr.models import WriteResult

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ReindexSummary:
    """Outcome of a full reindex.

    Attributes:
        pages: Number of listing pages fetched.
        total: Total story count reported by the content source.
        documents: Number of documents built.
        written: Whether a batch write was issued.
    """

    pages: int
    total: int
    documents: int
    written: bool


def page_count(total: int, per_page: int) -> int:
    """Return the number of pages needed to cover ``total`` items."""
    if total <= 0:
        return 0
    return math.ceil(total / per_page)


class ReindexCoordinator:
    """Rebuild the index from a snapshot of all stories.

    Clearing is a separate operation; call :meth:`clear_index` first when
    stale documents must be dropped.
    """

    def __init__(
        self,
        source: "ContentSource",
        writer: "IndexWriter",
        mapper: DocumentMapper | None = None,
    ) -> None:
        self._source = source
        self._writer = writer
        self._mapper = mapper or DocumentMapper()

    async def reindex_all(self) -> ReindexSummary:
        """Fetch every page, map every story, and submit one batch.

        Returns:
            ReindexSummary: Counts describing the run.

        Raises:
            UpstreamFetchError: If any page fetch fails; nothing is written.
            InvalidDocumentError: If a story cannot be mapped; nothing is written.
            IndexWriteError: If the batch write fails.
        """
        first = await self._source.fetch_page(1)
        pages = page_count(first.total, first.per_page)
        LOGGER.info("Reindexing %d stories across %d page(s).", first.total, pages)

        remaining = await self._fetch_pages(range(2, pages + 1))
        listing = [first, *remaining] if pages else []

        documents = self._map_pages(listing)
        written = False
        if documents:
            await self._writer.submit(documents)
            written = True
        else:
            LOGGER.info("No stories to index; skipping write.")

        return ReindexSummary(
            pages=pages,
            total=first.total,
            documents=len(documents),
            written=written,
        )

    async def clear_index(self) -> "WriteResult":
        """Delete every document from the index."""
        result = await self._writer.clear()
        LOGGER.info("Successfully cleared the Solr index.")
        return result

    async def _fetch_pages(self, numbers: Iterable[int]) -> list[ContentPage]:
        tasks = [asyncio.ensure_future(self._source.fetch_page(number)) for number in numbers]
        if not tasks:
            return []
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def _map_pages(self, listing: Iterable[ContentPage]) -> list[IndexDocument]:
        return [self._mapper.map(item) for page in listing for item in page.items]


__all__ = ["ReindexCoordinator", "ReindexSummary", "page_count"]
