"""
Dashboard widgets and their evaluation.
"""

from .context import EvaluationContext
from .evaluator import WidgetEvaluator, coerce_script_number, coerce_template_number
from .model import (
    DEFAULT_QUERY_TABLE_FIELDS,
    DEFAULT_QUERY_TABLE_LIMIT,
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
    WidgetBase,
    WidgetKind,
)

__all__ = [
    # Widget types
    "WidgetBase",
    "WidgetKind",
    "Widget",
    "StaticWidget",
    "ValueWidget",
    "NumberWidget",
    "StringWidget",
    "QueryNumberWidget",
    "ScriptNumberWidget",
    "ScriptStringWidget",
    "GraphWidget",
    "TableWidget",
    "QueryTableField",
    "QueryTableWidget",
    "DEFAULT_QUERY_TABLE_FIELDS",
    "DEFAULT_QUERY_TABLE_LIMIT",
    # Evaluation
    "EvaluationContext",
    "WidgetEvaluator",
    "coerce_script_number",
    "coerce_template_number",
]
