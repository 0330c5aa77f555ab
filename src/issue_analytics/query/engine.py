"""
Paginated, cached search queries.

Queries are template strings; they are resolved first and the resolved text
is the cache key. Pages are always fetched at the maximum page size so that a
later widget asking for more items of the same query can continue where an
earlier one stopped instead of starting over.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..errors import UnsupportedQueryTypeError
from ..expr.evaluator import ExpressionEvaluator
from .types import PAGE_SIZE, QueryCacheEntry, QueryResults, QueryType
from .url import query_to_url

if TYPE_CHECKING:
    from ..widgets.context import EvaluationContext

logger = logging.getLogger(__name__)

SUPPORTED_QUERY_TYPES = frozenset({QueryType.ISSUE})


class QueryEngine:
    """Resolves, fetches and caches search queries."""

    def __init__(self, evaluator: Optional[ExpressionEvaluator] = None, page_size: int = PAGE_SIZE):
        self._evaluator = evaluator or ExpressionEvaluator()
        self._page_size = page_size

    async def evaluate_query(
        self,
        query_type: QueryType,
        query: str,
        limit: int,
        context: EvaluationContext,
    ) -> QueryResults:
        """
        Runs a query, fetching only what the cache does not already hold.

        Args:
            query_type: The kind of items to search
            query: Query template
            limit: Number of items wanted; 0 fetches only the total count
            context: Evaluation context holding the client and the cache

        Returns:
            The total count, at most `limit` items and the search page URL

        Raises:
            UnsupportedQueryTypeError: If no search exists for the type
            QueryFetchError: If the remote search fails
        """
        if query_type not in SUPPORTED_QUERY_TYPES:
            raise UnsupportedQueryTypeError(query_type)

        resolved = await self._evaluator.parse_expression(query, context.scope())
        url = query_to_url(resolved, context.client.web_url)

        entry = context.query_cache.get(resolved)
        if entry is not None:
            logger.info(
                "reusing_cached_query",
                extra={
                    "query": resolved,
                    "cached_items": len(entry.items),
                    "total_count": entry.total_count,
                },
            )
        else:
            entry = QueryCacheEntry(query=resolved, total_count=0)

        while self._needs_page(entry, limit):
            page_number = entry.pages_fetched + 1

            logger.debug(
                "fetching_search_page",
                extra={"query": resolved, "page": page_number, "per_page": self._page_size},
            )

            page = await context.client.search(query_type, resolved, self._page_size, page_number)

            entry.pages_fetched = page_number
            entry.total_count = page.total_count
            entry.items.extend(page.items)

            if not page.items:
                entry.exhausted = True

        context.query_cache[resolved] = entry

        return QueryResults(
            total_count=entry.total_count,
            items=entry.items[:limit],
            url=url,
        )

    @staticmethod
    def _needs_page(entry: QueryCacheEntry, limit: int) -> bool:
        if entry.pages_fetched == 0:
            return True

        if entry.exhausted:
            return False

        fetched = len(entry.items)
        return fetched < limit and fetched < entry.total_count
