"""
HTML rendering of evaluated dashboards.

The page links a `dashboard.css` stylesheet and a `dashboard.js` script that
sit beside it. Widgets carry their color as a CSS class and every titled
widget gets a named anchor. Titles, values and URLs are escaped; dashboard
and section descriptions are emitted as written so they may contain markup.
"""

import math
import re
from html import escape
from typing import List, Optional

from ..analytics import Analytics, Section
from ..errors import RenderError
from ..expr.evaluator import stringify
from ..widgets.model import GraphWidget, NumberWidget, StringWidget, TableWidget

STYLESHEET = "dashboard.css"
SCRIPT = "dashboard.js"

# Graph bars narrower than this percentage do not show their value
MIN_LABELLED_WIDTH = 5

_ANCHOR_DISALLOWED = re.compile(r"[^A-Za-z0-9_\-]")


def create_anchor(title: str) -> str:
    """Turns a title into a fragment name: `Open PRs!` becomes `open-prs`."""
    return _ANCHOR_DISALLOWED.sub("", title.replace(" ", "-")).lower()


def _anchor(title: str) -> str:
    return f'<a name="{create_anchor(title)}"></a>'


def _css_class(base: str, color: Optional[str]) -> str:
    return f"{base} {escape(color)}" if color else base


def _link(text: str, url: Optional[str]) -> str:
    return f'<a href="{escape(url)}">{text}</a>' if url else text


class HtmlRenderer:
    """Renders a static dashboard as a standalone HTML page."""

    def render(self, analytics: Analytics) -> str:
        title = escape(analytics.title) if analytics.title is not None else "Dashboard"

        html: List[str] = [
            "<html>",
            "<head>",
            f"<title>{title}</title>",
            f'<link rel="stylesheet" href="{STYLESHEET}" type="text/css" media="all">',
            f'<script src="{SCRIPT}"></script>',
            "</head>",
            "<body>",
            '<div id="analytics">',
        ]

        if analytics.title is not None:
            html += [f"<h1>{title}</h1>", ""]

        if analytics.description is not None:
            html += ['<div id="main_description" class="description">', analytics.description, "</div>", ""]

        html.append('<div class="sections">')
        for section in analytics.sections:
            html += self._render_section(section)

        html += [
            "</div> <!-- sections -->",
            '<div id="footer">',
            "Generated by issue-analytics",
            "</div>",
            "</div> <!-- analytics -->",
            "</body>",
            "</html>",
            "",
        ]
        return "\n".join(html)

    def _render_section(self, section: Section) -> List[str]:
        html = ['<div class="section">', '<div class="section_metadata">']

        if section.title is not None:
            html += [_anchor(section.title), f'<h2 class="section_title">{escape(section.title)}</h2>', ""]

        if section.description is not None:
            html += ['<div class="description">', section.description, "</div>", ""]

        html += ["</div> <!-- section_metadata -->", '<div class="section_widgets">']

        grouping_numbers = False
        for widget in section.widgets:
            if isinstance(widget, NumberWidget):
                if not grouping_numbers:
                    html.append('<div class="number_widgets">')
                    grouping_numbers = True

                html.append(self._render_number(widget))
                continue

            if grouping_numbers:
                html.append("</div> <!-- number_widgets -->")
                grouping_numbers = False

            if isinstance(widget, StringWidget):
                html.append(self._render_string(widget))
            elif isinstance(widget, GraphWidget):
                html.append(self._render_graph(widget))
            elif isinstance(widget, TableWidget):
                html.append(self._render_table(widget))
            else:
                raise RenderError(
                    f"cannot render unknown widget type: {getattr(widget, 'kind', type(widget).__name__)}"
                )

        if grouping_numbers:
            html.append("</div> <!-- number_widgets -->")

        html += ["</div> <!-- section_widgets -->", "</div> <!-- section -->"]
        return html

    # ============================================================
    # Widgets
    # ============================================================

    def _render_number(self, widget: NumberWidget) -> str:
        html = []

        if widget.title is not None:
            html.append(_anchor(widget.title))
        if widget.url is not None:
            html.append(f'<a href="{escape(widget.url)}">')

        html.append(f'<div class="{_css_class("number_widget", widget.color)}">')
        if widget.title is not None:
            html.append(f'<span class="title">{escape(widget.title)}</span>')
        html.append(f'<span class="value">{escape(stringify(widget.value))}</span>')
        html.append("</div>")

        if widget.url is not None:
            html.append("</a>")

        return "\n".join(html)

    def _render_string(self, widget: StringWidget) -> str:
        html = []

        if widget.title is not None:
            html.append(_anchor(widget.title))
        if widget.url is not None:
            html.append(f'<a href="{escape(widget.url)}">')

        html.append(f'<div class="{_css_class("string_widget", widget.color)}">')
        if widget.title is not None:
            html.append(f'<h3 class="title">{escape(widget.title)}</h3>')
        html.append(f'<span class="value">{escape(widget.value)}</span>')
        html.append("</div> <!-- string_widget -->")

        if widget.url is not None:
            html.append("</a>")

        return "\n".join(html)

    def _render_graph(self, widget: GraphWidget) -> str:
        values = []
        for element in widget.elements:
            if not isinstance(element, NumberWidget) or isinstance(element.value, str):
                raise RenderError("graph elements must be static number widgets")
            values.append(element.value if math.isfinite(element.value) else 0)

        maximum = max(values + [0])

        html = ['<div class="graph_widget">']

        if widget.title is not None:
            html.append(_anchor(widget.title))
            html.append(f'<h3 class="graph_title">{_link(escape(widget.title), widget.url)}</h3>')

        html.append('<div class="graph">')

        for element, value in zip(widget.elements, values):
            scaled = max(math.floor(value / maximum * 100), 0) if maximum > 0 else 0
            value_class = "value" if scaled > 0 else "value empty_value"
            label = escape(stringify(element.value)) if scaled >= MIN_LABELLED_WIDTH else ""

            html.append(f'<div class="{_css_class("graph_item", element.color)}">')

            html.append('<span class="graph_item_title">')
            if element.title is not None:
                html.append(_link(f'<span class="title">{escape(element.title)}</span>', element.url))
            html.append("</span>")

            html.append('<span class="graph_item_value">')
            html.append(
                _link(f'<span class="{value_class}" style="width: {scaled}%;">{label}</span>', element.url)
            )
            html.append("</span>")

            html.append("</div>")

        html += ["</div>", "</div>"]
        return "\n".join(html)

    def _render_cell(self, tag: str, widget: object) -> str:
        if not isinstance(widget, (NumberWidget, StringWidget)):
            raise RenderError("table cells must be static number or string widgets")

        attributes = ""
        if widget.color is not None:
            attributes += f' class="{escape(widget.color)}"'
        if isinstance(widget, StringWidget) and widget.align is not None:
            attributes += f' style="text-align: {escape(widget.align)}"'

        value = escape(stringify(widget.value))
        return f"<{tag}{attributes}>{_link(value, widget.url)}</{tag}>"

    def _render_table(self, widget: TableWidget) -> str:
        html = ['<div class="table_widget">']

        if widget.title is not None:
            html.append(_anchor(widget.title))
            html.append(f'<h3 class="table_title">{_link(escape(widget.title), widget.url)}</h3>')

        html.append('<table class="table">')

        if widget.headers:
            html.append('<tr class="table_header">')
            html += [self._render_cell("th", cell) for cell in widget.headers]
            html.append("</tr>")

        for row in widget.elements:
            html.append('<tr class="table_element">')
            html += [self._render_cell("td", cell) for cell in row]
            html.append("</tr>")

        html += ["</table>", "</div>"]
        return "\n".join(html)
