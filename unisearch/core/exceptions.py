"""
Search error taxonomy.

Only UnknownSourceError reaches callers. The others describe backing-store
failures and are absorbed by the dispatcher or at the index boundary.
"""
from __future__ import annotations

from typing import Optional


class SearchError(Exception):
    """Base class for search failures."""


class UnknownSourceError(SearchError):
    """Requested index has no registered handler."""

    def __init__(self, source_id: str):
        self.source_id = source_id
        super().__init__(
            f'Sorry do not know how to search for features of type "{source_id}"'
        )


class ConnectionUnavailable(SearchError):
    """Backing database is not configured or cannot be reached."""

    def __init__(self, connection_id: str, reason: Optional[str] = None):
        self.connection_id = connection_id
        message = f"Database '{connection_id}' is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class QueryExecutionError(SearchError):
    """A count, fetch or lookup query failed at the connection layer."""

    def __init__(self, connection_id: str, subtype: str, cause: Exception):
        self.connection_id = connection_id
        self.subtype = subtype
        self.cause = cause
        super().__init__(f"{subtype} query on '{connection_id}' failed: {cause}")
