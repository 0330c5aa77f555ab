"""
Types shared by the query engine and search clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Protocol, runtime_checkable

# The search API returns at most this many items per page.
PAGE_SIZE = 100

Item = Dict[str, Any]


class QueryType(Enum):
    """Kinds of item searches a client can run."""

    ISSUE = "issue"


@dataclass
class SearchPage:
    """One page of search results."""

    # Total number of matching items as reported by the server
    total_count: int

    # Items on this page
    items: List[Item]


@dataclass
class QueryResults:
    """Result of evaluating a query for a widget."""

    total_count: int
    items: List[Item]

    # Browser URL showing the same search
    url: str


@dataclass
class QueryCacheEntry:
    """Everything fetched so far for one resolved query string."""

    query: str
    total_count: int
    items: List[Item] = field(default_factory=list)

    # Number of pages requested so far; the next request asks for page + 1
    pages_fetched: int = 0

    # Set once the server returned an empty page
    exhausted: bool = False

    def __post_init__(self) -> None:
        # Entries seeded with items but no page count hold whole pages
        if self.pages_fetched == 0 and self.items:
            self.pages_fetched = -(-len(self.items) // PAGE_SIZE)


QueryCache = Dict[str, QueryCacheEntry]


@runtime_checkable
class SearchClient(Protocol):
    """Runs one page of an item search."""

    @property
    def web_url(self) -> str:
        """Web root that browser links to search results point at."""
        ...

    async def search(
        self,
        query_type: QueryType,
        query: str,
        per_page: int,
        page: int,
    ) -> SearchPage:
        """
        Fetches one page of results.

        Args:
            query_type: The kind of items to search
            query: Resolved query string
            per_page: Page size
            page: 1-based page number
        """
        ...
