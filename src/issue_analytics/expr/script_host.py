"""
Script hosts execute author-supplied code against a named scope.

The evaluation pipeline only depends on the ScriptHost protocol. The default
PythonScriptHost runs scripts and expressions as Python with the full
privileges of the process; dashboard authors are trusted.
"""

from __future__ import annotations

import ast
import builtins
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Mapping, Protocol, runtime_checkable

from ..errors import AnalyticsError, ScriptError, ScriptSyntaxError

logger = logging.getLogger(__name__)

_ENTRY_POINT = "__dashboard_entry__"

_PARSE_FLAGS = ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT


@runtime_checkable
class ScriptHost(Protocol):
    """Executes scripts and single expressions against a scope."""

    async def run_script(self, source: str, scope: Mapping[str, Any]) -> Any:
        """Runs a block of statements and returns its result."""
        ...

    async def evaluate_expression(self, source: str, scope: Mapping[str, Any]) -> Any:
        """Evaluates one expression and returns its value."""
        ...


class PythonScriptHost:
    """
    Runs scripts as the body of an `async def` whose parameters are the scope.

    Scripts may use statements, `return` and `await`. An expression becomes the
    value of a single `return`. Author code is parsed as written and spliced
    into the function as syntax trees, so string literals are never altered.
    Awaitable results are awaited before being returned.
    """

    async def run_script(self, source: str, scope: Mapping[str, Any]) -> Any:
        statements = self._parse_statements(source)
        function = self._compile(statements, scope, source, "<script>")
        return await self._invoke(function, scope, "script")

    async def evaluate_expression(self, source: str, scope: Mapping[str, Any]) -> Any:
        if not source.strip():
            raise ScriptSyntaxError("empty expression", 0, source)

        # Parentheses let the expression span lines at any indentation
        tree = self._parse(f"(\n{source}\n)", "eval", source, "<expression>")
        statements: List[ast.stmt] = [ast.Return(value=tree.body)]

        function = self._compile(statements, scope, source, "<expression>")
        return await self._invoke(function, scope, "expression")

    # ============================================================
    # Compilation
    # ============================================================

    def _parse(self, code: str, mode: str, source: str, filename: str) -> Any:
        try:
            return compile(code, filename, mode, flags=_PARSE_FLAGS, dont_inherit=True)
        except SyntaxError as error:
            raise ScriptSyntaxError(
                f"invalid {filename.strip('<>')}: {error.msg}",
                None,
                source,
            ) from error

    def _parse_statements(self, source: str) -> List[ast.stmt]:
        """Parses a script; an indented script is parsed as one block."""
        if _is_indented(source):
            block = self._parse(f"if True:\n{source}", "exec", source, "<script>")
            statements = block.body[0].body
        else:
            statements = self._parse(source, "exec", source, "<script>").body

        return statements or [ast.Pass()]

    def _compile(
        self,
        statements: List[ast.stmt],
        scope: Mapping[str, Any],
        source: str,
        filename: str,
    ) -> Callable[..., Awaitable[Any]]:
        parameters = ", ".join(scope.keys())
        module = ast.parse(f"async def {_ENTRY_POINT}({parameters}):\n    pass\n")
        module.body[0].body = statements
        ast.fix_missing_locations(module)

        try:
            compiled = compile(module, filename, "exec", dont_inherit=True)
        except SyntaxError as error:
            raise ScriptSyntaxError(
                f"invalid {filename.strip('<>')}: {error.msg}",
                None,
                source,
            ) from error

        namespace: dict[str, Any] = {"__builtins__": builtins}
        exec(compiled, namespace)
        return namespace[_ENTRY_POINT]

    async def _invoke(
        self,
        function: Callable[..., Awaitable[Any]],
        scope: Mapping[str, Any],
        what: str,
    ) -> Any:
        try:
            result = await function(**scope)
            if inspect.isawaitable(result):
                result = await result
        except AnalyticsError:
            raise
        except Exception as error:
            logger.debug("script_failed", extra={"what": what, "error": str(error)})
            raise ScriptError(f"{what} failed: {error}") from error

        return result


def _is_indented(source: str) -> bool:
    """Whether the first line of code starts with whitespace."""
    for line in source.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return line[0].isspace()
    return False
