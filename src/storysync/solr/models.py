"""Solr update payloads and write results."""

from __future__ import annotations

from typing import Any, Dict, Union

from pydantic import BaseModel

MATCH_ALL_QUERY = "*:*"


class DeleteCommand(BaseModel):
    """Delete a single document by id."""

    id: str

    def to_payload(self) -> Dict[str, Any]:
        return {"delete": self.id}


class ClearCommand(BaseModel):
    """Delete every document matching ``query`` (all documents by default)."""

    query: str = MATCH_ALL_QUERY

    def to_payload(self) -> Dict[str, Any]:
        return {"delete": {"query": self.query}}


class WriteResult(BaseModel):
    """Successful response from the update endpoint.

    Attributes:
        status_code: HTTP status of the response.
        body: Decoded JSON response body.
    """

    status_code: int
    body: Union[Dict[str, Any], list, str, int, float, bool, None] = None


__all__ = ["MATCH_ALL_QUERY", "DeleteCommand", "ClearCommand", "WriteResult"]
