"""
Browser URLs for search queries.
"""

import re
from urllib.parse import quote

GITHUB_URL = "https://github.com"

_REPO_TOKEN = re.compile(r"(?:^|\s)repo:(\S+)(?=\s|$)")
_WHITESPACE = re.compile(r"\s+")

# Characters JavaScript's encodeURIComponent leaves alone, beyond
# letters, digits and "-_.~" which quote() never escapes.
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encodes a query string component."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def query_to_url(query: str, base_url: str = GITHUB_URL) -> str:
    """
    Builds the github.com page that shows the results of a search.

    The first `repo:<owner>/<name>` token selects the repository's issue
    search and is removed from the query; otherwise the global search is
    used. Whitespace in the query is collapsed.

    Args:
        query: A resolved search query
        base_url: Web root to build the URL against

    Returns:
        The search page URL
    """
    repo = None

    match = _REPO_TOKEN.search(query)
    if match:
        repo = match.group(1)
        query = f"{query[: match.start()]} {query[match.end() :]}"

    query = _WHITESPACE.sub(" ", query).strip()

    if repo:
        return f"{base_url}/{repo}/issues?q={encode_uri_component(query)}"

    return f"{base_url}/search?q={encode_uri_component(query)}"
