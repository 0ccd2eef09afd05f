"""
UniSearch API Services

Services:
- search_terms: Query text to search terms
- search_dispatch: Budgeted count/fetch fan-out over SQL templates
- search_sources: Index catalog (queries, enrichment, registry)
- search_normalizers: Raw rows to canonical results
- search_service: Orchestration and the search() entry point
"""
