"""
Search Service - federated keyword search across the species databases.

A query is split into terms and run against every enabled index (or a
single named one). Each index works through its own result budget; a
failing database only empties the index that uses it.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from unisearch.api.services.search_dispatch import SearchBudget, fetch_results
from unisearch.api.services.search_sources import (
    SOURCES,
    SearchSource,
    enabled_sources,
    get_source,
)
from unisearch.api.services.search_terms import SearchTerm, tokenize
from unisearch.core.exceptions import SearchError
from unisearch.core.settings import Settings, settings as default_settings
from unisearch.core.species import SpeciesDefs, get_species_defs
from unisearch.db.engine import ConnectionProvider, get_engine_registry
from unisearch.schemas.search_schema import (
    SearchResponse,
    SourceInfo,
    SourceResults,
    SourcesResponse,
)

logger = logging.getLogger(__name__)

ALL = "all"

# Seconds between checks on indexes running on the worker pool
POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class SearchRequest:
    source_id: str
    raw_query: str
    species: Optional[SpeciesDefs] = None


def run_source(
    source: SearchSource,
    terms: Sequence[SearchTerm],
    provider: ConnectionProvider,
    species: SpeciesDefs,
    budget: int,
) -> SourceResults:
    """
    Search one index.

    Errors raised inside the index (a failed enrichment lookup, a broken
    database handle) are logged and reported as no results.
    """
    try:
        rows, total = fetch_results(
            provider, source.queries(species), terms, SearchBudget(budget)
        )
        if source.enrich and rows:
            rows = source.enrich(provider, rows)
        results = source.normalize(rows, species)
    except (SearchError, SQLAlchemyError) as e:
        logger.warning(f"{source.name} search failed, returning no results: {e}")
        return SourceResults(results=[], total=0)

    logger.info(f"{source.name}: {len(results)} shown, {total} found")
    return SourceResults(results=results, total=total)


def _run_on_pool(
    selected: list[SearchSource],
    terms: Sequence[SearchTerm],
    provider: ConnectionProvider,
    species: SpeciesDefs,
    budget: int,
    config: Settings,
) -> dict[str, SourceResults]:
    """
    Run indexes on a bounded worker pool.

    An index's timeout counts from when a worker picks it up. Once every
    worker is held by an index that has timed out, indexes still waiting
    for a worker run in the calling thread instead.
    """
    timeout = config.search_source_timeout
    started: dict[str, float] = {}

    def timed_run(source: SearchSource) -> SourceResults:
        started[source.name] = time.monotonic()
        return run_source(source, terms, provider, species, budget)

    results: dict[str, SourceResults] = {}
    overdue: list[Future] = []
    pool = ThreadPoolExecutor(
        max_workers=config.search_max_workers,
        thread_name_prefix="unisearch",
    )
    try:
        pending = {pool.submit(timed_run, source): source for source in selected}
        while pending:
            done, _ = wait(pending, timeout=POLL_INTERVAL, return_when=FIRST_COMPLETED)
            for future in done:
                results[pending.pop(future).name] = future.result()

            now = time.monotonic()
            for future, source in list(pending.items()):
                start = started.get(source.name)
                if timeout is None or start is None or now - start < timeout:
                    continue
                logger.warning(
                    f"{source.name} search timed out after {timeout}s, returning no results"
                )
                results[source.name] = SourceResults(results=[], total=0)
                overdue.append(pending.pop(future))

            if sum(not f.done() for f in overdue) < config.search_max_workers:
                continue
            for future, source in list(pending.items()):
                # cancel() fails once a worker has started the index
                if future.cancel():
                    del pending[future]
                    logger.info(f"No free worker for {source.name}, running it inline")
                    results[source.name] = run_source(source, terms, provider, species, budget)
    finally:
        # do not wait on indexes that timed out
        pool.shutdown(wait=False, cancel_futures=True)

    return {source.name: results[source.name] for source in selected}


def search_all(
    terms: Sequence[SearchTerm],
    provider: ConnectionProvider,
    species: SpeciesDefs,
    config: Optional[Settings] = None,
    sources: Optional[list[SearchSource]] = None,
) -> dict[str, SourceResults]:
    """
    Search every enabled index, each with a fresh budget.

    Results are keyed by index name in catalog order, whether the indexes
    ran one after another or on the worker pool.
    """
    config = config or default_settings
    selected = enabled_sources(species, sources)
    budget = config.search_budget_all

    if config.search_max_workers <= 1 or len(selected) <= 1:
        return {
            source.name: run_source(source, terms, provider, species, budget)
            for source in selected
        }

    return _run_on_pool(selected, terms, provider, species, budget, config)


def search(
    request: SearchRequest,
    provider: Optional[ConnectionProvider] = None,
    config: Optional[Settings] = None,
    sources: Optional[list[SearchSource]] = None,
) -> SearchResponse:
    """
    Run a search request.

    ``source_id`` "all" searches every enabled index; any other value names
    a single index and raises UnknownSourceError when there is none. A
    request without search text returns performed=False and runs nothing.
    """
    config = config or default_settings
    species = request.species or get_species_defs()
    idx = (request.source_id or ALL).strip() or ALL
    query = request.raw_query or ""

    terms = tokenize(query)
    if not terms:
        return SearchResponse(idx=idx, q="", performed=False, results={})

    provider = provider or get_engine_registry()

    if idx.lower() == ALL:
        logger.info(f"Searching all indexes for '{query}' ({len(terms)} terms)")
        results = search_all(terms, provider, species, config, sources)
    else:
        source = get_source(idx, sources)
        logger.info(f"Searching {source.name} for '{query}' ({len(terms)} terms)")
        results = {
            source.name: run_source(
                source, terms, provider, species, config.search_budget_single
            )
        }

    return SearchResponse(idx=idx, q=query, performed=True, results=results)


def list_sources(
    species: Optional[SpeciesDefs] = None,
    sources: Optional[list[SearchSource]] = None,
) -> SourcesResponse:
    """Indexes known to the service and whether the species enables them."""
    species = species or get_species_defs()
    catalog = SOURCES if sources is None else sources
    enabled = {source.name for source in enabled_sources(species, catalog)}
    return SourcesResponse(
        species=species.name,
        sources=[
            SourceInfo(
                name=source.name,
                enabled=source.name in enabled,
                connections=source.connections(species),
            )
            for source in catalog
        ],
    )
