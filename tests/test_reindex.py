"""Tests for the full reindex coordinator."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeContentSource, FakeIndexWriter, make_story

from storysync.errors import IndexWriteError, InvalidDocumentError, UpstreamFetchError
from storysync.indexing import IndexDocument, ReindexCoordinator, page_count
from storysync.solr import ClearCommand


def _stories(count: int) -> list[dict]:
    return [make_story(number, text=f"text {number}") for number in range(1, count + 1)]


def test_page_count_rounds_up() -> None:
    assert page_count(250, 100) == 3
    assert page_count(200, 100) == 2
    assert page_count(1, 100) == 1
    assert page_count(0, 100) == 0


def test_reindex_fetches_each_page_once_and_writes_one_batch(writer: FakeIndexWriter) -> None:
    source = FakeContentSource(_stories(250), per_page=100)
    coordinator = ReindexCoordinator(source, writer)

    summary = asyncio.run(coordinator.reindex_all())

    assert sorted(source.page_calls) == [1, 2, 3]
    assert len(writer.payloads) == 1
    batch = writer.payloads[0]
    assert all(isinstance(document, IndexDocument) for document in batch)
    assert [document.id for document in batch] == [str(number) for number in range(1, 251)]
    assert summary.pages == 3
    assert summary.total == 250
    assert summary.documents == 250
    assert summary.written is True


def test_failed_page_aborts_before_any_write(writer: FakeIndexWriter) -> None:
    source = FakeContentSource(_stories(250), per_page=100, fail_pages=[2])
    coordinator = ReindexCoordinator(source, writer)

    with pytest.raises(UpstreamFetchError):
        asyncio.run(coordinator.reindex_all())

    assert writer.payloads == []


def test_failed_page_cancels_in_flight_fetches(writer: FakeIndexWriter) -> None:
    source = FakeContentSource(_stories(250), per_page=100, fail_pages=[2], slow_pages=[3])
    coordinator = ReindexCoordinator(source, writer)

    with pytest.raises(UpstreamFetchError):
        asyncio.run(coordinator.reindex_all())

    assert source.cancelled_pages == [3]
    assert writer.payloads == []


def test_failed_first_page_aborts(writer: FakeIndexWriter) -> None:
    source = FakeContentSource(_stories(10), fail_pages=[1])

    with pytest.raises(UpstreamFetchError):
        asyncio.run(ReindexCoordinator(source, writer).reindex_all())

    assert source.page_calls == [1]
    assert writer.payloads == []


def test_empty_catalog_performs_no_write(writer: FakeIndexWriter) -> None:
    source = FakeContentSource([])

    summary = asyncio.run(ReindexCoordinator(source, writer).reindex_all())

    assert source.page_calls == [1]
    assert writer.payloads == []
    assert summary.written is False
    assert summary.documents == 0


def test_unmappable_story_aborts_before_write(writer: FakeIndexWriter) -> None:
    stories = _stories(2) + [{"name": "No id", "content": {"component": "page"}}]
    source = FakeContentSource(stories)

    with pytest.raises(InvalidDocumentError):
        asyncio.run(ReindexCoordinator(source, writer).reindex_all())

    assert writer.payloads == []


def test_write_failure_is_raised_without_retry() -> None:
    source = FakeContentSource(_stories(3))
    writer = FakeIndexWriter(fail_status=500)

    with pytest.raises(IndexWriteError) as excinfo:
        asyncio.run(ReindexCoordinator(source, writer).reindex_all())

    assert excinfo.value.status_code == 500
    assert len(writer.payloads) == 1


def test_clear_index_is_a_separate_operation(writer: FakeIndexWriter) -> None:
    source = FakeContentSource(_stories(3))
    coordinator = ReindexCoordinator(source, writer)

    asyncio.run(coordinator.clear_index())

    assert len(writer.payloads) == 1
    assert isinstance(writer.payloads[0], ClearCommand)
    assert source.page_calls == []
