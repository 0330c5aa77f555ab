"""
Widget evaluator.

Reduces a templated widget to a static one: `number`, `string`, `graph` or
`table` with every template resolved. Evaluation never modifies the input
widget; each call builds new widgets.

Metadata semantics:
- The `title`, `url`, `color` and `align` of number and string widgets are
  templates evaluated with only the widget's resolved `value` bound.
- Graph and table titles and links are evaluated in the full context.
- Script results may be an object carrying `value` and any of `title`,
  `url`, `color`, `align`; fields present there win over the templates.
"""

import logging
import math
import re
from typing import Any, List, Mapping, Optional, Union, cast

from ..errors import WidgetTypeError
from ..expr.evaluator import ExpressionEvaluator, stringify
from ..query.engine import QueryEngine
from ..query.types import Item
from .context import EvaluationContext
from .model import (
    GraphWidget,
    NumberWidget,
    QueryNumberWidget,
    QueryTableField,
    QueryTableWidget,
    ScriptNumberWidget,
    ScriptStringWidget,
    StaticWidget,
    StringWidget,
    TableWidget,
    ValueWidget,
    Widget,
)

logger = logging.getLogger(__name__)

_SCRIPT_INTEGER = re.compile(r"\d+")
_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_OVERRIDE_FIELDS = ("title", "url", "color", "align")

Number = Union[int, float]


def coerce_script_number(result: Any) -> Number:
    """
    Converts a script result to a number.

    Numbers pass through. Anything else is stringified and accepted only if
    it is a run of digits; otherwise the value is NaN.
    """
    if isinstance(result, (int, float)) and not isinstance(result, bool):
        return result

    text = stringify(result)
    if _SCRIPT_INTEGER.fullmatch(text):
        return int(text)

    return math.nan


def coerce_template_number(text: str) -> Number:
    """
    Converts resolved template text to a number.

    Blank text is 0, integers stay integers, decimals become floats and
    anything else is NaN.
    """
    text = text.strip()

    if not text:
        return 0

    if not _DECIMAL.fullmatch(text):
        return math.nan

    try:
        return int(text)
    except ValueError:
        return float(text)


class WidgetEvaluator:
    """Evaluates widgets against an evaluation context."""

    def __init__(
        self,
        evaluator: Optional[ExpressionEvaluator] = None,
        query_engine: Optional[QueryEngine] = None,
    ):
        self._evaluator = evaluator or ExpressionEvaluator()
        self._queries = query_engine or QueryEngine(self._evaluator)

    @property
    def expressions(self) -> ExpressionEvaluator:
        return self._evaluator

    async def evaluate(self, widget: Widget, context: EvaluationContext) -> StaticWidget:
        """Evaluates a widget and returns a new static widget."""
        kind = widget.kind
        logger.debug("evaluating_widget", extra={"kind": kind, "title": widget.title})

        if kind == "number":
            return await self._evaluate_number(cast(NumberWidget, widget), context)

        if kind == "string":
            return await self._evaluate_string(cast(StringWidget, widget), context)

        if kind == "query_number":
            return await self._evaluate_query_number(cast(QueryNumberWidget, widget), context)

        if kind == "script_number":
            return await self._evaluate_script_number(cast(ScriptNumberWidget, widget), context)

        if kind == "script_string":
            return await self._evaluate_script_string(cast(ScriptStringWidget, widget), context)

        if kind == "graph":
            return await self._evaluate_graph(cast(GraphWidget, widget), context)

        if kind == "table":
            return await self._evaluate_table(cast(TableWidget, widget), context)

        if kind == "query_table":
            return await self._evaluate_query_table(cast(QueryTableWidget, widget), context)

        raise TypeError(f"unknown widget kind: {kind}")

    # ============================================================
    # Template Helpers
    # ============================================================

    async def evaluate_expression(
        self, template: Optional[str], context: EvaluationContext
    ) -> Optional[str]:
        """Resolves a template in the full context; None stays None."""
        if template is None:
            return None
        return await self._evaluator.parse_expression(template, context.scope())

    async def _evaluate_metadata(
        self,
        template: Optional[str],
        context: EvaluationContext,
        value: Union[Number, str],
    ) -> Optional[str]:
        if template is None:
            return None
        return await self._evaluator.parse_expression(
            template, context.with_value(value).scope()
        )

    async def _run_script(self, script: str, context: EvaluationContext) -> tuple[Any, dict]:
        """Runs a widget script and splits off any override fields."""
        result = await self._evaluator.run_script(script, context.scope())
        overrides: dict = {}

        if isinstance(result, Mapping) and "value" in result:
            overrides = {
                name: result[name]
                for name in _OVERRIDE_FIELDS
                if result.get(name) is not None
            }
            result = result["value"]

        return result, overrides

    async def _fill_metadata(
        self,
        widget: Any,
        names: tuple,
        overrides: dict,
        context: EvaluationContext,
        value: Union[Number, str],
    ) -> dict:
        resolved = {}
        for name in names:
            if name in overrides:
                resolved[name] = stringify(overrides[name])
            else:
                resolved[name] = await self._evaluate_metadata(
                    getattr(widget, name), context, value
                )
        return resolved

    # ============================================================
    # Value Widgets
    # ============================================================

    async def _evaluate_number(
        self, widget: NumberWidget, context: EvaluationContext
    ) -> NumberWidget:
        raw = widget.value
        value: Number

        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            value = raw
        else:
            value = coerce_template_number(
                await self._evaluator.parse_expression(str(raw), context.scope())
            )

        metadata = await self._fill_metadata(widget, ("title", "url", "color"), {}, context, value)
        return NumberWidget(value=value, **metadata)

    async def _evaluate_string(
        self, widget: StringWidget, context: EvaluationContext
    ) -> StringWidget:
        value = await self._evaluator.parse_expression(widget.value, context.scope())

        metadata = await self._fill_metadata(
            widget, ("title", "url", "align", "color"), {}, context, value
        )
        return StringWidget(value=value, **metadata)

    async def _evaluate_query_number(
        self, widget: QueryNumberWidget, context: EvaluationContext
    ) -> NumberWidget:
        results = await self._queries.evaluate_query(widget.query_type, widget.query, 0, context)
        value = results.total_count

        metadata = await self._fill_metadata(widget, ("title", "url", "color"), {}, context, value)
        if widget.url is None:
            metadata["url"] = results.url

        return NumberWidget(value=value, **metadata)

    async def _evaluate_script_number(
        self, widget: ScriptNumberWidget, context: EvaluationContext
    ) -> NumberWidget:
        result, overrides = await self._run_script(widget.script, context)
        value = coerce_script_number(result)

        metadata = await self._fill_metadata(
            widget, ("title", "url", "color"), overrides, context, value
        )
        return NumberWidget(value=value, **metadata)

    async def _evaluate_script_string(
        self, widget: ScriptStringWidget, context: EvaluationContext
    ) -> StringWidget:
        result, overrides = await self._run_script(widget.script, context)
        value = result if isinstance(result, str) else stringify(result)

        metadata = await self._fill_metadata(
            widget, ("title", "url", "align", "color"), overrides, context, value
        )
        return StringWidget(value=value, **metadata)

    # ============================================================
    # Containers
    # ============================================================

    async def _evaluate_graph(
        self, widget: GraphWidget, context: EvaluationContext
    ) -> GraphWidget:
        elements: List[NumberWidget] = []

        for element in widget.elements:
            result = await self.evaluate(element, context)

            if not isinstance(result, NumberWidget):
                raise WidgetTypeError("graph", "number", result.kind)

            elements.append(result)

        return GraphWidget(
            title=await self.evaluate_expression(widget.title, context),
            url=await self.evaluate_expression(widget.url, context),
            elements=tuple(elements),
        )

    async def _evaluate_table_cell(
        self, cell: Widget, context: EvaluationContext
    ) -> ValueWidget:
        result = await self.evaluate(cell, context)

        if not isinstance(result, (NumberWidget, StringWidget)):
            raise WidgetTypeError("table", "string or number", result.kind)

        return result

    async def _evaluate_table(
        self, widget: TableWidget, context: EvaluationContext
    ) -> TableWidget:
        headers = [await self._evaluate_table_cell(h, context) for h in widget.headers]

        rows = []
        for row in widget.elements:
            rows.append(tuple([await self._evaluate_table_cell(c, context) for c in row]))

        return TableWidget(
            title=await self.evaluate_expression(widget.title, context),
            url=await self.evaluate_expression(widget.url, context),
            headers=tuple(headers),
            elements=tuple(rows),
        )

    async def _evaluate_query_table(
        self, widget: QueryTableWidget, context: EvaluationContext
    ) -> TableWidget:
        results = await self._queries.evaluate_query(
            widget.query_type, widget.query, widget.limit, context
        )
        fields = widget.resolved_fields

        headers = tuple(StringWidget(value=f.label()) for f in fields)

        rows = []
        for item in results.items:
            cells = []
            for f in fields:
                value = await self._evaluate_field(f, item, context)
                cells.append(StringWidget(url=item.get("html_url"), value=value))
            rows.append(tuple(cells))

        title = await self.evaluate_expression(widget.title, context)
        if widget.url is not None:
            url = await self.evaluate_expression(widget.url, context)
        else:
            url = results.url

        return TableWidget(title=title, url=url, headers=headers, elements=tuple(rows))

    async def _evaluate_field(
        self, field: QueryTableField, item: Item, context: EvaluationContext
    ) -> str:
        if field.value is not None:
            return await self._evaluator.parse_expression(
                field.value, context.with_item(item).scope()
            )

        return stringify(item.get(field.property or ""))
