"""
Shared fixtures: an in-memory search client standing in for GitHub.
"""

from typing import Callable, Dict, List, Optional, Tuple

import pytest

from issue_analytics.query.types import Item, QueryType, SearchPage


def make_issues(count: int, prefix: str = "issue") -> List[Item]:
    return [
        {
            "number": n,
            "title": f"{prefix} {n}",
            "html_url": f"https://github.com/owner/repo/issues/{n}",
            "state": "open",
        }
        for n in range(1, count + 1)
    ]


class FakeSearchClient:
    """Serves pages from fixed result lists and records every request."""

    def __init__(
        self,
        results: Optional[Dict[str, List[Item]]] = None,
        reported_totals: Optional[Dict[str, int]] = None,
        web_url: str = "https://github.com",
    ):
        self.results = results or {}
        self.reported_totals = reported_totals or {}
        self.web_url = web_url
        self.requests: List[Tuple[QueryType, str, int, int]] = []

    async def search(self, query_type: QueryType, query: str, per_page: int, page: int) -> SearchPage:
        self.requests.append((query_type, query, per_page, page))

        items = self.results.get(query, [])
        start = (page - 1) * per_page
        total = self.reported_totals.get(query, len(items))

        return SearchPage(total_count=total, items=list(items[start : start + per_page]))

    def pages_for(self, query: str) -> List[int]:
        return [page for _, q, _, page in self.requests if q == query]


@pytest.fixture
def issues() -> Callable[..., List[Item]]:
    return make_issues


@pytest.fixture
def search_client() -> Callable[..., FakeSearchClient]:
    """Returns a factory for in-memory search clients."""
    return FakeSearchClient
