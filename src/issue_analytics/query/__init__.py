"""
Search queries against the remote item-tracking API.
"""

from .engine import QueryEngine
from .github_client import (
    GitHubSearchClient,
    GitHubSearchClientConfig,
    GitHubSearchClientOptions,
    create_github_client,
)
from .types import (
    PAGE_SIZE,
    Item,
    QueryCache,
    QueryCacheEntry,
    QueryResults,
    QueryType,
    SearchClient,
    SearchPage,
)
from .url import encode_uri_component, query_to_url

__all__ = [
    "PAGE_SIZE",
    "Item",
    "QueryCache",
    "QueryCacheEntry",
    "QueryResults",
    "QueryType",
    "SearchClient",
    "SearchPage",
    "QueryEngine",
    "GitHubSearchClient",
    "GitHubSearchClientConfig",
    "GitHubSearchClientOptions",
    "create_github_client",
    "encode_uri_component",
    "query_to_url",
]
