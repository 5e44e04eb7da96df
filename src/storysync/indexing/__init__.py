"""Synchronization core: text extraction, mapping, reindex and dispatch."""

from .dispatcher import DELETE_ACTIONS, UPSERT_ACTIONS, ChangeDispatcher
from .mapper import DocumentMapper, map_story
from .models import APP_KEY, ChangeNotification, DispatchOutcome, IndexDocument
from .reindex import ReindexCoordinator, ReindexSummary, page_count
from .text import find_text_values

__all__ = [
    "APP_KEY",
    "ChangeDispatcher",
    "ChangeNotification",
    "DELETE_ACTIONS",
    "DispatchOutcome",
    "DocumentMapper",
    "IndexDocument",
    "ReindexCoordinator",
    "ReindexSummary",
    "UPSERT_ACTIONS",
    "find_text_values",
    "map_story",
    "page_count",
]
