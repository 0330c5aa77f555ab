"""
Error types for dashboard evaluation.

Every error raised while loading, evaluating or rendering a dashboard
extends AnalyticsError and carries an ErrorKind. None of them are
recovered from locally: the first error ends the run.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Broad category of an evaluation failure."""

    GRAMMAR = "grammar"
    SCOPE = "scope"
    TYPE_CONSTRAINT = "type_constraint"
    REMOTE = "remote"
    SCRIPT = "script"
    CONFIG = "config"
    RENDER = "render"


class AnalyticsError(Exception):
    """
    Base error class for all dashboard errors.
    """

    kind: ErrorKind = ErrorKind.SCRIPT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GrammarError(AnalyticsError):
    """
    Error raised when input text cannot be scanned or parsed.
    """

    kind = ErrorKind.GRAMMAR

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        source: Optional[str] = None,
    ):
        super().__init__(message)
        self.position = position
        self.source = source

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.source is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.source}\n  {pointer}"


class DateParseError(GrammarError):
    """
    Error raised when a date adjustment expression is malformed.
    """

    pass


class TemplateSyntaxError(GrammarError):
    """
    Error raised when a `{{ }}` span is not closed.
    """

    pass


class ScriptSyntaxError(GrammarError):
    """
    Error raised when a script or expression does not compile.
    """

    pass


class ScopeError(AnalyticsError):
    """
    Error raised when a binding cannot be placed in the evaluation scope.
    """

    kind = ErrorKind.SCOPE

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name


class WidgetTypeError(AnalyticsError):
    """
    Error raised when a widget reduces to a variant its container rejects.
    """

    kind = ErrorKind.TYPE_CONSTRAINT

    def __init__(self, container: str, expected: str, actual: str):
        message = f"{container} widget elements must be {expected} widgets, got {actual}"
        super().__init__(message)
        self.container = container
        self.expected = expected
        self.actual = actual


class UnsupportedQueryTypeError(AnalyticsError):
    """
    Error raised for a query type no search client operation exists for.
    """

    kind = ErrorKind.TYPE_CONSTRAINT

    def __init__(self, query_type: object):
        super().__init__(f"unknown query type: {query_type}")
        self.query_type = query_type


class QueryFetchError(AnalyticsError):
    """
    Error raised when the remote search API fails.
    """

    kind = ErrorKind.REMOTE

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ScriptError(AnalyticsError):
    """
    Error raised when author code fails while running.
    """

    kind = ErrorKind.SCRIPT


class ConfigError(AnalyticsError):
    """
    Error raised when a dashboard configuration is invalid.
    """

    kind = ErrorKind.CONFIG

    def __init__(self, message: str, location: Optional[str] = None):
        where = f" for {location}" if location else ""
        super().__init__(f"config: invalid configuration{where}: {message}")
        self.location = location


class RenderError(AnalyticsError):
    """
    Error raised when an evaluated tree cannot be rendered.
    """

    kind = ErrorKind.RENDER
