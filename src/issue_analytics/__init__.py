"""
Issue analytics dashboards.

Evaluates declarative dashboards whose widgets are filled from templates,
scripts and GitHub issue searches.
"""

from .analytics import Analytics, Section, evaluate_analytics, evaluate_section
from .errors import (
    AnalyticsError,
    ConfigError,
    DateParseError,
    ErrorKind,
    GrammarError,
    QueryFetchError,
    RenderError,
    ScopeError,
    ScriptError,
    ScriptSyntaxError,
    TemplateSyntaxError,
    UnsupportedQueryTypeError,
    WidgetTypeError,
)

__version__ = "0.1.0"

__all__ = [
    "Analytics",
    "Section",
    "evaluate_analytics",
    "evaluate_section",
    # Errors
    "ErrorKind",
    "AnalyticsError",
    "GrammarError",
    "DateParseError",
    "TemplateSyntaxError",
    "ScriptSyntaxError",
    "ScopeError",
    "WidgetTypeError",
    "UnsupportedQueryTypeError",
    "QueryFetchError",
    "ScriptError",
    "ConfigError",
    "RenderError",
]
