"""Tests for mapping stories to index documents."""

from __future__ import annotations

import json

import pytest

from storysync.content import ContentItem
from storysync.errors import InvalidDocumentError
from storysync.indexing import APP_KEY, DocumentMapper, map_story


def test_maps_story_to_expected_document() -> None:
    item = ContentItem.model_validate(
        {
            "id": "7",
            "content": {"component": "page", "body": [{"text": "Hello"}, {"text": "World"}]},
            "full_slug": "home",
            "name": "Home",
        }
    )

    document = map_story(item)

    assert document.to_payload() == {
        "id": "7",
        "type": "page",
        "appKey": "StoryblokSolrIndexer",
        "url": "home",
        "title": "Home",
        "content": "Hello World",
    }


def test_numeric_ids_are_rendered_as_strings() -> None:
    item = ContentItem.model_validate({"id": 42, "name": "Answer", "full_slug": "answer"})

    assert map_story(item).id == "42"


def test_story_without_text_has_empty_content() -> None:
    item = ContentItem.model_validate({"id": 1, "content": {"component": "page", "body": []}})

    document = map_story(item)

    assert document.content == ""
    assert document.type == "page"


def test_missing_component_omits_type() -> None:
    item = ContentItem.model_validate({"id": 3, "name": "Plain", "content": {"text": "only"}})

    payload = map_story(item).to_payload()

    assert "type" not in payload
    assert payload["content"] == "only"


def test_missing_content_tree_is_not_an_error() -> None:
    item = ContentItem.model_validate({"id": 5, "name": "Empty"})

    document = map_story(item)

    assert document.content == ""
    assert document.type is None


def test_missing_id_raises_invalid_document() -> None:
    item = ContentItem.model_validate({"name": "Orphan", "content": {"component": "page"}})

    with pytest.raises(InvalidDocumentError):
        map_story(item)


def test_mapping_is_deterministic() -> None:
    raw = {
        "id": 9,
        "uuid": "b6f2",
        "name": "Article",
        "full_slug": "blog/article",
        "content": {"component": "article", "body": [{"text": "a"}, {"grid": [{"text": "b"}]}]},
    }

    first = json.dumps(map_story(ContentItem.model_validate(raw)).to_payload())
    second = json.dumps(map_story(ContentItem.model_validate(raw)).to_payload())

    assert first == second


def test_document_mapper_uses_configured_app_key() -> None:
    item = ContentItem.model_validate({"id": 1})

    assert DocumentMapper().map(item).app_key == APP_KEY
    assert DocumentMapper(app_key="OtherProducer")(item).to_payload()["appKey"] == "OtherProducer"
