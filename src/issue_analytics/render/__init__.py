"""
Renderers for evaluated dashboards.
"""

from typing import Protocol, runtime_checkable

from ..analytics import Analytics
from ..config.models import OutputConfig
from ..errors import RenderError
from .html import HtmlRenderer
from .json import JsonRenderer
from .markdown import MarkdownRenderer


@runtime_checkable
class Renderer(Protocol):
    """Turns a static dashboard into text."""

    def render(self, analytics: Analytics) -> str: ...


RENDERERS = {
    "html": HtmlRenderer,
    "json": JsonRenderer,
    "markdown": MarkdownRenderer,
}


def create_renderer(output: OutputConfig) -> Renderer:
    """Returns the renderer for the configured output format."""
    renderer = RENDERERS.get(output.format)
    if renderer is None:
        raise RenderError(f"config: unknown output format type '{output.format}'")
    return renderer()


__all__ = [
    "HtmlRenderer",
    "JsonRenderer",
    "MarkdownRenderer",
    "RENDERERS",
    "Renderer",
    "create_renderer",
]
