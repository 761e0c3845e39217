# =============================================================================
# core/services/search_service.py - Provider Smart Search
# =============================================================================
# Matching, scoring and distance ranking are done by the
# smart_search_providers database function. This service only validates
# filters and converts rows.
# =============================================================================

import logging

from core.models.search import SearchFilters, SearchResult
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

SEARCH_FUNCTION = "smart_search_providers"


class SearchService:

    @staticmethod
    def search(filters: SearchFilters) -> list[SearchResult]:
        """
        Run a smart search.

        Returns an empty list without querying when no filter is set.

        Raises:
            SupabaseClientError: If the RPC fails
        """
        if filters.is_empty():
            return []

        rows = SupabaseClient.rpc(SEARCH_FUNCTION, filters.to_rpc_params())
        logger.debug(f"Smart search returned {len(rows)} rows")
        return [SearchResult.model_validate(row) for row in rows]
