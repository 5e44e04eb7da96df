"""Errors raised while synchronizing content into the search index."""

from __future__ import annotations

from typing import Any


class SyncError(Exception):
    """Base exception for synchronization failures."""


class UpstreamFetchError(SyncError):
    """Raised when reading from the content source fails.

    Attributes:
        status_code: HTTP status returned by the content source, if any.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidDocumentError(SyncError):
    """Raised when a content item cannot be turned into an index document."""


class IndexWriteError(SyncError):
    """Raised when the search engine rejects or fails a write.

    Attributes:
        status_code: HTTP status returned by the search engine, if any.
        body: Raw response body, if one was received.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


__all__ = ["SyncError", "UpstreamFetchError", "InvalidDocumentError", "IndexWriteError"]
