"""Text extraction from nested story content."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

TEXT_KEY = "text"


def find_text_values(tree: Any) -> list[str]:
    """Collect every string stored under a ``text`` key, at any depth.

    Mappings are walked in key order and nested mappings or sequences are
    descended into before moving on to the next key, so the result follows a
    depth-first traversal. String values under other keys are ignored. Content
    trees are expected to be acyclic.

    Args:
        tree: Story content as decoded from JSON; ``None`` yields no values.

    Returns:
        list[str]: Text values in traversal order.
    """
    result: list[str] = []
    _collect(tree, result)
    return result


def _collect(node: Any, result: list[str]) -> None:
    if isinstance(node, Mapping):
        for key, value in node.items():
            if key == TEXT_KEY and isinstance(value, str):
                result.append(value)
            elif _is_container(value):
                _collect(value, result)
    elif _is_container(node):
        for element in node:
            _collect(element, result)


def _is_container(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


__all__ = ["TEXT_KEY", "find_text_values"]
