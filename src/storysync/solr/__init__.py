"""Solr index access for storysync."""

from .client import (
    IndexWriter,
    SolrClient,
    UpdatePayload,
    basic_auth_header,
    build_update_url,
    serialize_payload,
)
from .models import MATCH_ALL_QUERY, ClearCommand, DeleteCommand, WriteResult

__all__ = [
    "IndexWriter",
    "SolrClient",
    "UpdatePayload",
    "basic_auth_header",
    "build_update_url",
    "serialize_payload",
    "MATCH_ALL_QUERY",
    "ClearCommand",
    "DeleteCommand",
    "WriteResult",
]
