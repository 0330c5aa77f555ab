"""
Expression engine.

Template resolution, script execution and the date adjustment helpers
available to both.
"""

from .dates import (
    DateExpressionParser,
    date,
    datetime,
    parse_date_expression,
    time,
)
from .evaluator import (
    BUILTIN_BINDINGS,
    ExpressionEvaluator,
    create_scope,
    stringify,
)
from .script_host import PythonScriptHost, ScriptHost
from .template import Segment, TemplateScanner, has_expressions, scan_template

__all__ = [
    # Dates
    "DateExpressionParser",
    "parse_date_expression",
    "date",
    "time",
    "datetime",
    # Evaluation
    "BUILTIN_BINDINGS",
    "ExpressionEvaluator",
    "create_scope",
    "stringify",
    # Script hosts
    "ScriptHost",
    "PythonScriptHost",
    # Templates
    "Segment",
    "TemplateScanner",
    "scan_template",
    "has_expressions",
]
