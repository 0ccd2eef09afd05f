"""
CLI commands for UniSearch.

Usage:
    python -m unisearch.cli.commands search "BRCA2 rs699*" --idx all
    python -m unisearch.cli.commands sources
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from unisearch.api.services.search_service import SearchRequest, list_sources, search
from unisearch.core.exceptions import UnknownSourceError
from unisearch.core.species import get_species_defs
from unisearch.db.engine import get_engine_registry
from unisearch.schemas.search_schema import SearchResponse
from unisearch.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def format_response(response: SearchResponse) -> str:
    """Plain-text listing of a search response, one hit per line."""
    if not response.performed:
        return "No search text given."

    lines = []
    for name, found in response.results.items():
        lines.append(f"{name}: {len(found.results)} of {found.total}")
        for hit in found.results:
            line = f"  {hit.subtype}\t{hit.id}\t{hit.url}"
            if hit.description:
                line = f"{line}\t{hit.description}"
            lines.append(line)
    return "\n".join(lines)


def cmd_search(query: str, idx: str, as_json: bool) -> int:
    """Run a search and print the results."""
    registry = get_engine_registry()
    try:
        response = search(
            SearchRequest(source_id=idx, raw_query=query, species=get_species_defs()),
            provider=registry,
        )
    except UnknownSourceError as e:
        logger.error(str(e))
        return 2
    finally:
        registry.dispose()

    if as_json:
        print(response.model_dump_json(indent=2))
    else:
        print(format_response(response))
    return 0


def cmd_sources() -> int:
    """Print the searchable indexes for the configured species."""
    info = list_sources(get_species_defs())
    for source in info.sources:
        state = "enabled" if source.enabled else "disabled"
        print(f"{source.name}\t{state}\t{','.join(source.connections)}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="UniSearch commands",
        prog="python -m unisearch.cli.commands",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    parser.add_argument(
        "--log-sql", action="store_true", help="Log the SQL each index runs"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    search_parser = subparsers.add_parser("search", help="Search the species databases")
    search_parser.add_argument("query", help="Search text (trailing * for prefix search)")
    search_parser.add_argument("--idx", default="all", help="Index to search (default: all)")
    search_parser.add_argument("--json", action="store_true", help="Print JSON")

    subparsers.add_parser("sources", help="List searchable indexes")

    args = parser.parse_args(argv)
    setup_logging(
        "unisearch",
        level=args.log_level.upper(),
        log_file=args.log_file,
        log_sql=args.log_sql,
    )

    if args.command == "search":
        return cmd_search(args.query, args.idx, args.json)
    if args.command == "sources":
        return cmd_sources()

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
