"""
Retrieval service.
Finds the stored chunks closest to a query.
"""
from typing import List

from ..errors import InputError
from ..logging_config import logger
from ..schemas import RetrievalResult

PRIMARY_MAX_DISTANCE = 0.85
QUALITY_MAX_DISTANCE = 0.9


class RetrievalEngine:
    """
    Two-phase nearest-neighbour search.

    1. Closest `limit` chunks with distance < 0.85.
    2. Only if that is empty: closest `limit` chunks with no distance bound.
    Then rows with distance >= 0.9 are dropped, unless that would drop them all.
    """

    def __init__(self, store, embedder):
        self.store = store
        self.embedder = embedder

    def retrieve(self, query: str, limit: int = 10) -> List[RetrievalResult]:
        """
        Return up to `limit` chunks ordered by non-decreasing distance.

        Raises:
            InputError: Empty query or limit < 1
            ProviderError: Query embedding failed
            StoreError: The search failed
        """
        if not query or not query.strip():
            raise InputError("query is required")
        if limit < 1:
            raise InputError("limit must be at least 1")

        query_vector = self.embedder.embed(query)

        rows = self.store.nearest_neighbors(
            query_vector, max_distance=PRIMARY_MAX_DISTANCE, limit=limit
        )
        phase = "primary"
        if not rows:
            rows = self.store.nearest_neighbors(query_vector, max_distance=None, limit=limit)
            phase = "fallback"

        # TODO: the 0.9 cutoff is only reachable on fallback rows; fold it into the fallback query
        kept = [r for r in rows if r.distance < QUALITY_MAX_DISTANCE]
        results = kept if kept else rows

        logger.info(
            "Retrieved chunks",
            phase=phase,
            candidates=len(rows),
            returned=len(results),
            best_distance=results[0].distance if results else None,
        )
        return sorted(results, key=lambda r: r.distance)
