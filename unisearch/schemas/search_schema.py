"""Search schema definitions for the federated keyword search."""
from __future__ import annotations

from typing import Optional
from pydantic import BaseModel


class ExtraUrl(BaseModel):
    """Secondary link shown beside a result (e.g. region overview)."""
    label: str
    title: str
    url: str


class CanonicalResult(BaseModel):
    """Single search hit, independent of the index it came from."""
    index: str  # "Gene", "SNP", "Sequence", ...
    subtype: str
    id: str
    url: str
    extra_url: Optional[ExtraUrl] = None
    description: str = ""
    species: str


class SourceResults(BaseModel):
    """Fetched hits for one index plus the total number of matches."""
    results: list[CanonicalResult]
    total: int  # may exceed len(results) once the budget is spent


class SearchResponse(BaseModel):
    """Response for /api/search."""
    idx: str
    q: str
    performed: bool  # False when no search text was supplied
    results: dict[str, SourceResults]
    # e.g., {"Gene": {...}, "SNP": {...}}


class SourceInfo(BaseModel):
    """An index available for searching."""
    name: str
    enabled: bool
    connections: list[str]


class SourcesResponse(BaseModel):
    """Response for /api/search/sources."""
    species: str
    sources: list[SourceInfo]
