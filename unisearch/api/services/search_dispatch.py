"""
Budgeted fan-out of count/fetch queries.

Every index is described by a list of SourceQuery pairs. For each pair and
each search term the count query runs first; rows are only fetched while
the index still has budget left. The budget is charged with the number of
matches rather than the number of rows fetched, so the reported total stays
exact after fetching stops.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from unisearch.api.services.search_terms import SearchTerm
from unisearch.core.exceptions import ConnectionUnavailable, QueryExecutionError
from unisearch.db.engine import ConnectionProvider

logger = logging.getLogger(__name__)

RawRow = tuple[Any, ...]


@dataclass(frozen=True)
class SourceQuery:
    """
    A count/fetch template pair run against one database.

    Templates hold an ``{op}`` slot for the comparator and the bind
    parameters ``:key`` and ``:fulltext_key``; ``params`` holds any fixed
    values the templates also bind (e.g. ``:db``). The fetch template must
    not carry its own LIMIT; ``LIMIT :limit`` is appended when it runs.
    """

    connection_id: str
    subtype: str
    count_sql: str
    fetch_sql: str
    params: dict[str, Any] = field(default_factory=dict)

    def bind_params(self, term: SearchTerm) -> dict[str, Any]:
        return {**self.params, **term.bind_params()}

    def render_count(self, term: SearchTerm):
        return text(self.count_sql.format(op=term.operator.sql))

    def render_fetch(self, term: SearchTerm):
        return text(f"{self.fetch_sql.format(op=term.operator.sql)} LIMIT :limit")


class SearchBudget:
    """Rows one index may still return."""

    def __init__(self, initial: int):
        self.initial = initial
        self.remaining = initial

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def fetch_limit(self, matched: int) -> int:
        return max(0, min(self.remaining, matched))

    def consume(self, matched: int) -> None:
        self.remaining -= matched

    def __repr__(self) -> str:
        return f"SearchBudget(initial={self.initial}, remaining={self.remaining})"


def _engine_for(provider: ConnectionProvider, connection_id: str) -> Engine:
    engine = provider.get_connection(connection_id)
    if engine is None:
        raise ConnectionUnavailable(connection_id, "not configured for this site")
    return engine


def count_matches(
    provider: ConnectionProvider,
    query: SourceQuery,
    term: SearchTerm,
) -> int:
    """
    Number of matches for a term.

    Raises ConnectionUnavailable when the site has no such database and
    QueryExecutionError when the count itself fails.
    """
    engine = _engine_for(provider, query.connection_id)
    try:
        with engine.connect() as conn:
            result = conn.execute(query.render_count(term), query.bind_params(term)).scalar()
    except SQLAlchemyError as e:
        raise QueryExecutionError(query.connection_id, query.subtype, e) from e
    return int(result or 0)


def fetch_rows(
    provider: ConnectionProvider,
    query: SourceQuery,
    term: SearchTerm,
    limit: int,
) -> list[RawRow]:
    """Fetch at most ``limit`` rows for a term."""
    if limit <= 0:
        return []
    engine = _engine_for(provider, query.connection_id)
    params = {**query.bind_params(term), "limit": limit}
    try:
        with engine.connect() as conn:
            rows = conn.execute(query.render_fetch(term), params).fetchall()
    except SQLAlchemyError as e:
        raise QueryExecutionError(query.connection_id, query.subtype, e) from e
    return [tuple(row) for row in rows]


def fetch_results(
    provider: ConnectionProvider,
    queries: Sequence[SourceQuery],
    terms: Sequence[SearchTerm],
    budget: SearchBudget,
) -> tuple[list[RawRow], int]:
    """
    Run every (query, term) pair in order against the budget.

    Args:
        provider: Source of database engines
        queries: Count/fetch pairs, in the order they should run
        terms: Tokenized search terms
        budget: Shared budget for this index, updated in place

    Returns:
        (rows fetched in call order, total number of matches)
    """
    rows: list[RawRow] = []
    total = 0

    for query in queries:
        for term in terms:
            try:
                matched = count_matches(provider, query, term)
            except ConnectionUnavailable as e:
                logger.debug(f"{query.subtype}: {e}, treating as no matches")
                continue
            except QueryExecutionError as e:
                logger.warning(f"Count failed, treating as no matches: {e}")
                continue

            if not matched:
                continue

            total += matched
            if budget.exhausted:
                continue

            limit = budget.fetch_limit(matched)
            try:
                rows.extend(fetch_rows(provider, query, term, limit))
            except (ConnectionUnavailable, QueryExecutionError) as e:
                logger.warning(f"Fetch failed after {matched} matches: {e}")
            budget.consume(matched)

    logger.debug(f"Fetched {len(rows)} of {total} matches ({budget!r})")
    return rows, total


def scalar_lookup(
    provider: ConnectionProvider,
    connection_id: str,
    sql: str,
    params: dict[str, Any],
) -> Optional[RawRow]:
    """Single-row secondary lookup used to enrich fetched rows."""
    engine = provider.get_connection(connection_id)
    if engine is None:
        return None
    try:
        with engine.connect() as conn:
            row = conn.execute(text(sql), params).first()
    except SQLAlchemyError as e:
        raise QueryExecutionError(connection_id, "lookup", e) from e
    return tuple(row) if row is not None else None
