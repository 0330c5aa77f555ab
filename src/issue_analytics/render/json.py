"""
Slack webhook rendering of evaluated dashboards.

The payload is a list of Block Kit blocks: the dashboard title, then for each
section its title and one line per number widget, with dividers between
sections. Other widget types have no Slack form and are left out.
"""

import json
from typing import Any, Dict, List, Optional

from ..analytics import Analytics, Section
from ..expr.evaluator import stringify
from ..widgets.model import NumberWidget
from .colors import render_color

DIVIDER: Dict[str, Any] = {"type": "divider"}


def _mrkdwn(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


class JsonRenderer:
    """Renders a static dashboard as a Slack webhook payload."""

    def render(self, analytics: Analytics) -> str:
        blocks: List[Dict[str, Any]] = []

        if analytics.title is not None:
            blocks.append(_mrkdwn(f"*{analytics.title}*"))

        for index, section in enumerate(analytics.sections):
            if index > 0:
                blocks.append(DIVIDER)
            blocks += self._render_section(section)

        return json.dumps({"blocks": blocks}, indent=2, ensure_ascii=False) + "\n"

    def _render_section(self, section: Section) -> List[Dict[str, Any]]:
        blocks = []

        if section.title is not None:
            blocks.append(_mrkdwn(f"*{section.title}*"))

        lines = [
            f"{widget.title or ''}: {self._render_number(widget)}"
            for widget in section.widgets
            if isinstance(widget, NumberWidget)
        ]
        # Slack rejects sections with empty text
        if lines:
            blocks.append(_mrkdwn("\n".join(lines)))

        return blocks

    def _render_number(self, widget: NumberWidget) -> str:
        text = stringify(widget.value)
        if widget.color is not None:
            text = f"{render_color(widget.color)} {text}"
        return _slack_link(text, widget.url)


def _slack_link(text: str, url: Optional[str]) -> str:
    return f"<{url} | {text}>" if url is not None else text
