"""
Tests for search page URLs.
"""

import pytest

from issue_analytics.query.url import encode_uri_component, query_to_url


class TestQueryToUrl:
    """Tests for query_to_url."""

    def test_repository_query(self):
        assert (
            query_to_url("repo:libgit2/libgit2 is:open label:bug")
            == "https://github.com/libgit2/libgit2/issues?q=is%3Aopen%20label%3Abug"
        )

    def test_global_query(self):
        assert (
            query_to_url("org:libgit2 is:open")
            == "https://github.com/search?q=org%3Alibgit2%20is%3Aopen"
        )

    @pytest.mark.parametrize(
        "query",
        [
            "repo:owner/name is:issue is:open",
            "is:issue repo:owner/name is:open",
            "is:issue is:open repo:owner/name",
            "  is:issue   repo:owner/name\tis:open  ",
        ],
    )
    def test_repo_token_anywhere(self, query):
        assert query_to_url(query) == "https://github.com/owner/name/issues?q=is%3Aissue%20is%3Aopen"

    def test_only_first_repo_token_is_used(self):
        url = query_to_url("repo:a/one repo:b/two is:open")

        assert url == "https://github.com/a/one/issues?q=repo%3Ab%2Ftwo%20is%3Aopen"

    def test_repo_prefix_inside_other_token_is_ignored(self):
        url = query_to_url("label:repo:x/y is:open")

        assert url.startswith("https://github.com/search?q=")

    def test_repo_only(self):
        assert query_to_url("repo:owner/name") == "https://github.com/owner/name/issues?q="

    def test_custom_base_url(self):
        url = query_to_url("is:open", base_url="https://github.example.com")

        assert url == "https://github.example.com/search?q=is%3Aopen"

    def test_date_comparison_query(self):
        assert (
            query_to_url("is:pr created:>=2020-02-29 is:open")
            == "https://github.com/search?q=is%3Apr%20created%3A%3E%3D2020-02-29%20is%3Aopen"
        )

    @pytest.mark.parametrize(
        "query",
        [
            "repo:foo/bar is:pr created:>=2020-02-29 is:open",
            "is:pr repo:foo/bar created:>=2020-02-29 is:open",
            "is:pr created:>=2020-02-29 is:open repo:foo/bar",
            " is:pr  repo:foo/bar   created:>=2020-02-29     is:open\t",
        ],
    )
    def test_date_comparison_repository_query(self, query):
        assert (
            query_to_url(query)
            == "https://github.com/foo/bar/issues?q=is%3Apr%20created%3A%3E%3D2020-02-29%20is%3Aopen"
        )


def test_encode_uri_component():
    assert encode_uri_component("a b&c=d/e") == "a%20b%26c%3Dd%2Fe"
    assert encode_uri_component("created:>2020-01-01") == "created%3A%3E2020-01-01"
    assert encode_uri_component("it's (fine)!*~") == "it's%20(fine)!*~"
