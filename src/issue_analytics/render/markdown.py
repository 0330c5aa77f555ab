"""
Markdown rendering of evaluated dashboards.

Consecutive number widgets of a section are grouped into one two-column
table; graphs become tables with a bar column; string and table widgets are
rendered on their own. Any widget that is not static fails the render.
"""

import math
from typing import List, Optional, Sequence

from ..analytics import Analytics, Section
from ..errors import RenderError
from ..expr.evaluator import stringify
from ..widgets.model import GraphWidget, NumberWidget, StringWidget, TableWidget
from .colors import render_color

# Length of the longest bar of a graph, in block characters
BAR_LENGTH = 35
BAR = "█"

_ALIGNMENT_RULES = {
    "left": ":--",
    "center": ":-:",
    "right": "--:",
}


def _decorate(text: str, color: Optional[str], url: Optional[str]) -> str:
    if color is not None:
        text = f"{render_color(color)} {text}"
    if url is not None:
        text = f"[{text}]({url})"
    return text


class MarkdownRenderer:
    """Renders a static dashboard as Markdown text."""

    def render(self, analytics: Analytics) -> str:
        lines: List[str] = []

        if analytics.title is not None:
            lines += [f"# {analytics.title}", ""]

        if analytics.description is not None:
            lines += [analytics.description, ""]

        for section in analytics.sections:
            lines += self._render_section(section)

        lines.append("")
        return "\n".join(lines)

    def _render_section(self, section: Section) -> List[str]:
        lines: List[str] = []

        if section.title is not None:
            lines += [f"## {section.title}", ""]

        if section.description is not None:
            lines += [section.description, ""]

        grouping_numbers = False
        for widget in section.widgets:
            if isinstance(widget, NumberWidget):
                if not grouping_numbers:
                    lines += ["| Query |  |", "|:------|-:|"]
                    grouping_numbers = True

                lines.append(f"| {widget.title or ''} | {self._render_number(widget)} |")
                continue

            if grouping_numbers:
                lines.append("")
                grouping_numbers = False

            if isinstance(widget, StringWidget):
                lines.append(self._render_string(widget))
            elif isinstance(widget, GraphWidget):
                lines.append(self._render_graph(widget))
            elif isinstance(widget, TableWidget):
                lines.append(self._render_table(widget))
            else:
                raise RenderError(
                    f"cannot render unknown widget type: {getattr(widget, 'kind', type(widget).__name__)}"
                )

        if grouping_numbers:
            lines.append("")

        return lines

    # ============================================================
    # Widgets
    # ============================================================

    def _render_number(self, widget: NumberWidget) -> str:
        return _decorate(stringify(widget.value), widget.color, widget.url)

    def _render_string(self, widget: StringWidget) -> str:
        parts = []
        if widget.title is not None:
            parts.append(f"#### {widget.title}\n\n")
        parts.append(_decorate(widget.value, widget.color, widget.url))
        parts.append("\n")
        return "".join(parts)

    def _render_graph(self, widget: GraphWidget) -> str:
        values = []
        for element in widget.elements:
            if not isinstance(element, NumberWidget) or isinstance(element.value, str):
                raise RenderError("graph elements must be static number widgets")
            values.append(element.value)

        finite = [v for v in values if not math.isnan(v)]
        maximum = max(finite + [0])
        scale = BAR_LENGTH / maximum if maximum > 0 else 0

        lines = []
        if widget.title:
            lines += [f"#### {widget.title}", ""]

        lines.append(f"| {widget.title or ''} |  | 0 - {stringify(maximum)} |")
        lines.append("|:------------------------------------|-:|:-------|")

        for element, value in zip(widget.elements, values):
            length = 0 if math.isnan(value) else max(int(value * scale), 0)
            lines.append(
                f"| {element.title or ''} | {self._render_number(element)} | {BAR * length} |"
            )

        lines.append("")
        return "\n".join(lines)

    def _render_cell(self, widget: object) -> str:
        if not isinstance(widget, (NumberWidget, StringWidget)):
            raise RenderError("table cells must be static number or string widgets")
        return _decorate(stringify(widget.value), widget.color, widget.url)

    def _render_table(self, widget: TableWidget) -> str:
        headers: Sequence = widget.headers or ()
        columns = max([len(headers)] + [len(row) for row in widget.elements])

        if columns == 0:
            return ""

        lines = []
        if widget.title:
            lines += [f"#### {widget.title}", ""]

        header_cells = [
            self._render_cell(headers[i]) if i < len(headers) else "" for i in range(columns)
        ]
        lines.append("| " + " | ".join(header_cells) + " |")

        rules = []
        for i in range(columns):
            align = headers[i].align if i < len(headers) and isinstance(headers[i], StringWidget) else None
            rules.append(_ALIGNMENT_RULES.get(align or "", "---"))
        lines.append("|" + "|".join(rules) + "|")

        for row in widget.elements:
            cells = [self._render_cell(row[i]) if i < len(row) else "" for i in range(columns)]
            lines.append("| " + " | ".join(cells) + " |")

        lines.append("")
        return "\n".join(lines)
