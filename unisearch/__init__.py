"""
UniSearch - federated keyword search for a genome browser species site.

A single query is fanned out over the species databases (core, vega, est,
variation, compara, funcgen) and the matches are returned per index
(Gene, SNP, Sequence, Domain, Family, Marker, QTL, OligoProbe,
GenomicAlignment) with links into the site.

Packages:
- api: FastAPI routers and search services
- core: Settings, species configuration and error types
- db: Database engines and FastAPI dependencies
- schemas: Pydantic schemas for responses
- cli: Command-line interface
- utils: Logging helpers

Usage:
    # Run the API server
    uvicorn unisearch.main:app --reload --port 8000

    # Search from the command line
    python -m unisearch.cli.commands search "BRCA2"

Environment Variables:
    UNISEARCH_DATABASES: JSON map of connection id to database URL
    SPECIES_NAME / SPECIES_PATH: species used for result links
    ENSEMBL_SEARCH_IDXS: JSON list of enabled indexes (default: all)
    LOG_LEVEL: Logging level (default: INFO)
"""

__version__ = "0.1.0"
