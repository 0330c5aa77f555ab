"""
Command-line entry point: evaluate a dashboard configuration and render it.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .analytics import evaluate_analytics
from .config import load_config_file
from .errors import AnalyticsError
from .query.github_client import GitHubSearchClientConfig, create_github_client
from .render import create_renderer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="issue-analytics",
        description="Evaluate an issue analytics dashboard and render it.",
    )
    ap.add_argument("config", help="Path to the dashboard configuration (YAML or JSON)")
    ap.add_argument("--token", help="GitHub token (defaults to $GITHUB_TOKEN)")
    ap.add_argument("--api-url", help="GitHub REST API root (defaults to $GITHUB_API_URL)")
    ap.add_argument(
        "--web-url",
        help="Web root for result links (defaults to $GITHUB_SERVER_URL, else derived from the API root)",
    )
    ap.add_argument("--output", help="Output path (defaults to output.filename, then stdout)")
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return ap


async def run(
    config_path: str,
    token: Optional[str] = None,
    api_url: Optional[str] = None,
    output: Optional[str] = None,
    web_url: Optional[str] = None,
) -> tuple[str, Optional[str]]:
    """Loads, evaluates and renders a dashboard; returns the text and where it was written."""
    dashboard = load_config_file(config_path)
    renderer = create_renderer(dashboard.output)

    client_config = GitHubSearchClientConfig.from_env(token=token, api_url=api_url, web_url=web_url)

    async with create_github_client(client_config) as client:
        result = await evaluate_analytics(dashboard.analytics, client)

    text = renderer.render(result)

    destination = output or dashboard.output.filename
    if destination:
        Path(destination).write_text(text, encoding="utf-8")
        logger.info("wrote_output", extra={"path": destination})

    return text, destination


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        text, destination = asyncio.run(
            run(args.config, args.token, args.api_url, args.output, args.web_url)
        )
    except (AnalyticsError, OSError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1

    if not destination:
        sys.stdout.write(text)

    return 0


if __name__ == "__main__":
    sys.exit(main())
