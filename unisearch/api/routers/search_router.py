import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from unisearch.api.services import search_service
from unisearch.api.services.search_service import SearchRequest
from unisearch.core.exceptions import UnknownSourceError
from unisearch.core.settings import settings
from unisearch.core.species import SpeciesDefs
from unisearch.db.deps import get_connections, get_species
from unisearch.db.engine import EngineRegistry
from unisearch.schemas.search_schema import SearchResponse, SourcesResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/search", tags=["search"])


@router.get("", response_model=SearchResponse)
def search(
    q: str = Query("", description="Search text; a trailing * makes a term a prefix search"),
    idx: str = Query("all", description="Index to search, or 'all'"),
    type_: Optional[str] = Query(None, alias="type", description="Alternative name for idx"),
    connections: EngineRegistry = Depends(get_connections),
    species: SpeciesDefs = Depends(get_species),
):
    """
    Search the species databases.

    With idx=all every index enabled for the species is searched with a
    small budget each; naming an index (Gene, SNP, Sequence, ...) returns
    more rows for that index only. Results are grouped by index with the
    total number of matches found.
    """
    request = SearchRequest(source_id=type_ or idx, raw_query=q, species=species)
    try:
        return search_service.search(request, provider=connections)
    except UnknownSourceError as e:
        logger.info(f"Unsupported search type: {e.source_id}")
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/sources", response_model=SourcesResponse)
def sources(species: SpeciesDefs = Depends(get_species)):
    """
    List the searchable indexes and whether the species enables them.
    """
    return search_service.list_sources(species)
