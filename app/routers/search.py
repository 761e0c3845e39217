# =============================================================================
# app/routers/search.py - Smart Search Endpoint
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel, Field

from core.models.search import SearchFilters, SearchResult
from core.services.search_service import SearchService

router = APIRouter()


class SearchResponse(BaseModel):
    """Matches ordered by the database's match score."""
    results: list[SearchResult] = Field(default_factory=list)
    total: int = 0


@router.post("/search", response_model=SearchResponse)
async def smart_search(filters: SearchFilters):
    """
    Search providers and services.

    Returns an empty result when no filter is given.
    """
    results = SearchService.search(filters)
    return SearchResponse(results=results, total=len(results))
