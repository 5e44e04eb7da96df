"""Tests for text extraction from nested story content."""

from storysync.indexing import find_text_values


def test_tree_without_text_keys_yields_nothing() -> None:
    tree = {
        "component": "page",
        "title": "Ignored",
        "body": [{"component": "teaser", "headline": "Also ignored", "count": 3}],
    }

    assert find_text_values(tree) == []


def test_empty_and_missing_trees_yield_nothing() -> None:
    assert find_text_values(None) == []
    assert find_text_values({}) == []
    assert find_text_values([]) == []


def test_collects_text_at_every_depth_in_traversal_order() -> None:
    tree = {
        "component": "page",
        "text": "first",
        "body": [
            {"text": "second", "columns": [{"text": "third"}, {"text": "fourth"}]},
            {"nested": {"deeper": {"text": "fifth"}}},
        ],
        "footer": {"text": "sixth"},
    }

    assert find_text_values(tree) == ["first", "second", "third", "fourth", "fifth", "sixth"]


def test_nested_values_are_visited_before_later_siblings() -> None:
    tree = {"a": {"text": "inner"}, "text": "outer"}

    assert find_text_values(tree) == ["inner", "outer"]


def test_non_string_text_values_are_descended_into_or_skipped() -> None:
    tree = {
        "text": {"type": "doc", "content": [{"type": "paragraph", "text": "rich"}]},
        "body": [{"text": 42}, {"text": None}, {"text": "plain"}],
    }

    assert find_text_values(tree) == ["rich", "plain"]


def test_extraction_is_repeatable() -> None:
    tree = {"body": [{"text": "Hello"}, {"text": "World"}]}

    assert find_text_values(tree) == find_text_values(tree) == ["Hello", "World"]
