"""
Tests for GitHubSearchClient.

Uses aiohttp test server for integration testing.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest
from aiohttp import web

from issue_analytics.errors import ErrorKind, QueryFetchError, UnsupportedQueryTypeError
from issue_analytics.query.github_client import (
    DEFAULT_API_URL,
    GitHubSearchClient,
    GitHubSearchClientConfig,
    GitHubSearchClientOptions,
    create_github_client,
    web_url_for_api,
)
from issue_analytics.query.types import QueryType


@dataclass
class SearchServerState:
    """State for the test HTTP server."""

    total_count: int = 2
    items: list = field(default_factory=lambda: [{"number": 1}, {"number": 2}])
    return_error: Optional[int] = None
    body: Optional[Any] = None
    delay: Optional[float] = None
    requests: list = field(default_factory=list)


class SearchServer:
    """Test HTTP server standing in for the search API."""

    def __init__(self, state: SearchServerState):
        self.state = state
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None
        self.port: int = 0

    async def start(self) -> str:
        """Start the test server and return the API root."""
        app = web.Application()
        app.router.add_get("/search/issues", self._handle_search)

        self.runner = web.AppRunner(app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, "127.0.0.1", 0)
        await self.site.start()

        if self.site._server and self.site._server.sockets:
            self.port = self.site._server.sockets[0].getsockname()[1]

        return f"http://127.0.0.1:{self.port}"

    async def stop(self) -> None:
        if self.runner:
            await self.runner.cleanup()
            self.runner = None

    async def _handle_search(self, request: web.Request) -> web.Response:
        state = self.state
        state.requests.append({"query": dict(request.query), "headers": dict(request.headers)})

        if state.delay and state.delay > 0:
            await asyncio.sleep(state.delay)

        if state.return_error:
            return web.json_response({"message": "Validation Failed"}, status=state.return_error)

        if state.body is not None:
            return web.json_response(state.body)

        return web.json_response({"total_count": state.total_count, "items": state.items})


@pytest.fixture
async def search_server():
    """Fixture that provides a search server factory."""
    servers: list[SearchServer] = []

    async def create_server(**kwargs: Any) -> tuple[str, SearchServer]:
        server = SearchServer(SearchServerState(**kwargs))
        url = await server.start()
        servers.append(server)
        return url, server

    yield create_server

    for server in servers:
        await server.stop()


class TestSearch:
    """Tests for running searches."""

    async def test_returns_page(self, search_server):
        url, _ = await search_server(total_count=42)

        async with GitHubSearchClient(GitHubSearchClientOptions(api_url=url)) as client:
            page = await client.search(QueryType.ISSUE, "is:open", 100, 1)

        assert page.total_count == 42
        assert page.items == [{"number": 1}, {"number": 2}]

    async def test_sends_query_parameters(self, search_server):
        url, server = await search_server()

        async with GitHubSearchClient(GitHubSearchClientOptions(api_url=url)) as client:
            await client.search(QueryType.ISSUE, "repo:o/r label:bug", 100, 3)

        assert server.state.requests[0]["query"] == {
            "q": "repo:o/r label:bug",
            "per_page": "100",
            "page": "3",
        }

    async def test_sends_headers(self, search_server):
        url, server = await search_server()
        options = GitHubSearchClientOptions(api_url=url, token="secret", user_agent="tests")

        async with GitHubSearchClient(options) as client:
            await client.search(QueryType.ISSUE, "is:open", 100, 1)

        headers = server.state.requests[0]["headers"]
        assert headers["Authorization"] == "Bearer secret"
        assert headers["User-Agent"] == "tests"
        assert headers["Accept"] == "application/vnd.github+json"

    async def test_anonymous_without_token(self, search_server):
        url, server = await search_server()

        async with GitHubSearchClient(GitHubSearchClientOptions(api_url=url)) as client:
            await client.search(QueryType.ISSUE, "is:open", 100, 1)

        assert "Authorization" not in server.state.requests[0]["headers"]


class TestFailures:
    """Tests for failed searches."""

    async def test_http_error(self, search_server):
        url, _ = await search_server(return_error=422)

        async with GitHubSearchClient(GitHubSearchClientOptions(api_url=url)) as client:
            with pytest.raises(QueryFetchError, match="HTTP 422") as info:
                await client.search(QueryType.ISSUE, "is:open", 100, 1)

        assert info.value.status == 422
        assert info.value.kind is ErrorKind.REMOTE

    async def test_malformed_response(self, search_server):
        url, _ = await search_server(body={"unexpected": True})

        async with GitHubSearchClient(GitHubSearchClientOptions(api_url=url)) as client:
            with pytest.raises(QueryFetchError, match="without total_count and items"):
                await client.search(QueryType.ISSUE, "is:open", 100, 1)

    async def test_timeout(self, search_server):
        url, _ = await search_server(delay=1.0)
        options = GitHubSearchClientOptions(api_url=url, timeout_ms=50)

        async with GitHubSearchClient(options) as client:
            with pytest.raises(QueryFetchError, match="timed out"):
                await client.search(QueryType.ISSUE, "is:open", 100, 1)

    async def test_connection_refused(self, search_server):
        url, server = await search_server()
        await server.stop()

        async with GitHubSearchClient(GitHubSearchClientOptions(api_url=url)) as client:
            with pytest.raises(QueryFetchError):
                await client.search(QueryType.ISSUE, "is:open", 100, 1)

    async def test_unsupported_query_type(self):
        client = GitHubSearchClient()

        with pytest.raises(UnsupportedQueryTypeError, match="unknown query type"):
            await client.search("discussion", "is:open", 100, 1)


class TestConfig:
    """Tests for client configuration."""

    def test_defaults(self):
        options = GitHubSearchClientConfig().to_options()

        assert options.api_url == DEFAULT_API_URL
        assert options.token is None
        assert options.timeout_ms == 30000

    def test_camel_case_properties(self):
        config = GitHubSearchClientConfig(
            apiUrl="https://github.example.com/api/v3/",
            timeoutMs=500,
            userAgent="dashboards",
        )

        options = config.to_options()

        assert options.api_url == "https://github.example.com/api/v3"
        assert options.timeout_ms == 500
        assert options.user_agent == "dashboards"

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="timeout_ms"):
            GitHubSearchClientConfig(timeoutMs=-1).to_options()

    def test_from_env(self):
        config = GitHubSearchClientConfig.from_env(
            {"GITHUB_TOKEN": "env-token", "GITHUB_API_URL": "https://ghe.example.com/api"}
        )

        assert config.token == "env-token"
        assert config.api_url == "https://ghe.example.com/api"

    def test_from_env_overrides_win(self):
        config = GitHubSearchClientConfig.from_env({"GITHUB_TOKEN": "env-token"}, token="flag", api_url=None)

        assert config.token == "flag"
        assert config.api_url is None

    async def test_create_from_mapping(self):
        client = create_github_client({"token": "t", "apiUrl": "https://example.com/"})

        assert client.options.token == "t"
        assert client.options.api_url == "https://example.com"
        await client.close()

    def test_web_url_option(self):
        options = GitHubSearchClientConfig(webUrl="https://ghe.example.com/").to_options()

        assert options.web_url == "https://ghe.example.com"
        assert GitHubSearchClient(options).web_url == "https://ghe.example.com"

    def test_web_url_from_env(self):
        config = GitHubSearchClientConfig.from_env({"GITHUB_SERVER_URL": "https://ghe.example.com"})

        assert config.web_url == "https://ghe.example.com"

    def test_web_url_derived_from_api_url(self):
        options = GitHubSearchClientConfig(apiUrl="https://ghe.example.com/api/v3").to_options()

        assert GitHubSearchClient(options).web_url == "https://ghe.example.com"
        assert GitHubSearchClient().web_url == "https://github.com"


@pytest.mark.parametrize(
    "api_url, web_url",
    [
        ("https://api.github.com", "https://github.com"),
        ("https://api.github.com/", "https://github.com"),
        ("https://ghe.example.com/api/v3", "https://ghe.example.com"),
        ("https://ghe.example.com/api/v3/", "https://ghe.example.com"),
        ("http://localhost:8080/api", "http://localhost:8080"),
        ("not a url", "https://github.com"),
    ],
)
def test_web_url_for_api(api_url, web_url):
    assert web_url_for_api(api_url) == web_url
