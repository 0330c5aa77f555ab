"""
GitHub search API client.

Runs issue and pull request searches against the REST search endpoint using
aiohttp. Failures are not retried; they surface as QueryFetchError and end
the dashboard run.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

import aiohttp
from pydantic import BaseModel, ConfigDict

from ..errors import QueryFetchError, UnsupportedQueryTypeError
from .types import QueryType, SearchPage
from .url import GITHUB_URL

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "issue-analytics"

ENV_VAR_GITHUB_TOKEN = "GITHUB_TOKEN"
ENV_VAR_GITHUB_API_URL = "GITHUB_API_URL"
ENV_VAR_GITHUB_SERVER_URL = "GITHUB_SERVER_URL"

# GitHub Enterprise Server serves its REST API below this path of the web root
_ENTERPRISE_API_PATH = "/api/v3"

_SEARCH_PATHS = {
    QueryType.ISSUE: "/search/issues",
}


@dataclass
class GitHubSearchClientOptions:
    """Configuration options for GitHubSearchClient."""

    # REST API root
    api_url: str = DEFAULT_API_URL

    # Token sent as a bearer credential; anonymous when unset
    token: Optional[str] = None

    # Request timeout in milliseconds
    timeout_ms: int = 30000

    # Value of the User-Agent header (required by the API)
    user_agent: str = DEFAULT_USER_AGENT

    # Web root for browser links; derived from api_url when unset
    web_url: Optional[str] = None


class GitHubSearchClientConfig(BaseModel):
    """
    Configuration for GitHubSearchClient.

    Supports both camelCase and snake_case property names for flexibility.
    """

    model_config = ConfigDict(extra="allow")

    api_url: Optional[str] = None
    token: Optional[str] = None
    timeout_ms: Optional[int] = None
    user_agent: Optional[str] = None
    web_url: Optional[str] = None

    def to_options(self) -> GitHubSearchClientOptions:
        """Normalizes the configuration into client options."""
        extra: Mapping[str, Any] = self.model_extra or {}

        api_url = self.api_url or extra.get("apiUrl") or DEFAULT_API_URL
        if not isinstance(api_url, str) or not api_url.strip():
            raise ValueError("api_url must be a non-empty string")

        timeout_ms = self.timeout_ms or extra.get("timeoutMs") or 30000
        if not isinstance(timeout_ms, int | float) or timeout_ms <= 0:
            raise ValueError("timeout_ms must be a positive number")

        user_agent = self.user_agent or extra.get("userAgent") or DEFAULT_USER_AGENT
        web_url = self.web_url or extra.get("webUrl")

        return GitHubSearchClientOptions(
            api_url=api_url.strip().rstrip("/"),
            token=self.token or None,
            timeout_ms=int(timeout_ms),
            user_agent=user_agent,
            web_url=web_url.strip().rstrip("/") if web_url else None,
        )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> GitHubSearchClientConfig:
        """Builds a configuration from GITHUB_TOKEN, GITHUB_API_URL and GITHUB_SERVER_URL."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "token": environ.get(ENV_VAR_GITHUB_TOKEN) or None,
            "api_url": environ.get(ENV_VAR_GITHUB_API_URL) or None,
            "web_url": environ.get(ENV_VAR_GITHUB_SERVER_URL) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class GitHubSearchClient:
    """
    A SearchClient backed by the GitHub REST search API.

    Use as an async context manager, or call close() when done.
    """

    def __init__(
        self,
        options: Optional[GitHubSearchClientOptions] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._options = options or GitHubSearchClientOptions()
        self._session = session
        self._owns_session = session is None

    @property
    def options(self) -> GitHubSearchClientOptions:
        return self._options

    @property
    def web_url(self) -> str:
        """Web root that browser links to search results point at."""
        if self._options.web_url:
            return self._options.web_url
        return web_url_for_api(self._options.api_url)

    async def __aenter__(self) -> GitHubSearchClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Closes the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def search(
        self,
        query_type: QueryType,
        query: str,
        per_page: int,
        page: int,
    ) -> SearchPage:
        path = _SEARCH_PATHS.get(query_type)
        if path is None:
            raise UnsupportedQueryTypeError(query_type)

        url = f"{self._options.api_url}{path}"
        params = {"q": query, "per_page": str(per_page), "page": str(page)}

        logger.debug(
            "searching",
            extra={"url": url, "query": query, "per_page": per_page, "page": page},
        )

        session = self._get_session()

        try:
            async with session.get(url, params=params, headers=self._headers()) as response:
                if not response.ok:
                    body = await response.text()
                    logger.error(
                        "search_failed",
                        extra={
                            "url": url,
                            "status": response.status,
                            "reason": response.reason,
                        },
                    )
                    raise QueryFetchError(
                        f"search for '{query}' failed: HTTP {response.status}: "
                        f"{response.reason}: {body}",
                        status=response.status,
                    )

                data = await response.json()

        except asyncio.TimeoutError as error:
            logger.error(
                "search_timeout",
                extra={"url": url, "timeout_ms": self._options.timeout_ms},
            )
            raise QueryFetchError(
                f"search for '{query}' timed out after {self._options.timeout_ms}ms"
            ) from error

        except aiohttp.ClientError as error:
            logger.error("search_request_failed", extra={"url": url, "error": str(error)})
            raise QueryFetchError(f"search for '{query}' failed: {error}") from error

        return _parse_search_page(data, query)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self._options.timeout_ms / 1000)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._options.user_agent,
        }
        if self._options.token:
            headers["Authorization"] = f"Bearer {self._options.token}"
        return headers


def _parse_search_page(data: Any, query: str) -> SearchPage:
    if not isinstance(data, dict):
        raise QueryFetchError(f"search for '{query}' returned a non-object response")

    total_count = data.get("total_count")
    items = data.get("items")

    if not isinstance(total_count, int) or not isinstance(items, list):
        raise QueryFetchError(
            f"search for '{query}' returned a response without total_count and items"
        )

    return SearchPage(total_count=total_count, items=items)


def create_github_client(
    config: Optional[GitHubSearchClientConfig | dict[str, Any]] = None,
) -> GitHubSearchClient:
    """Creates a client from a configuration model or mapping."""
    if config is None:
        config = GitHubSearchClientConfig.from_env()
    elif isinstance(config, dict):
        config = GitHubSearchClientConfig(**config)

    return GitHubSearchClient(config.to_options())


def web_url_for_api(api_url: str) -> str:
    """
    Derives the web root from a REST API root.

    `https://api.github.com` maps to `https://github.com`; an Enterprise
    Server root such as `https://ghe.example.com/api/v3` maps to
    `https://ghe.example.com`; any other root maps to its scheme and host.
    """
    api_url = api_url.rstrip("/")

    if api_url == DEFAULT_API_URL:
        return GITHUB_URL

    if api_url.endswith(_ENTERPRISE_API_PATH):
        return api_url[: -len(_ENTERPRISE_API_PATH)]

    parts = urlsplit(api_url)
    if not parts.scheme or not parts.netloc:
        return GITHUB_URL

    return f"{parts.scheme}://{parts.netloc}"
