"""
Template and script evaluation.

Resolves `{{ expression }}` spans inside template strings and runs whole
scripts. Both share one scope: the `date`, `time` and `datetime` helpers plus
any caller-supplied bindings.
"""

import keyword
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ScopeError
from .dates import date, datetime, time
from .script_host import PythonScriptHost, ScriptHost
from .template import has_expressions, scan_template

logger = logging.getLogger(__name__)

BUILTIN_BINDINGS: Mapping[str, Any] = {
    "date": date,
    "time": time,
    "datetime": datetime,
}


def stringify(value: Any) -> str:
    """
    Converts an evaluation result to display text.

    None becomes the empty string, booleans are lowercase and integral
    floats drop their fractional part.
    """
    if value is None:
        return ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isfinite(value) and value.is_integer():
            return str(int(value))

    return str(value)


def create_scope(bindings: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Builds an evaluation scope from the builtins and extra bindings.

    Raises:
        ScopeError: If a binding redefines a builtin or is not an identifier
    """
    scope: Dict[str, Any] = dict(BUILTIN_BINDINGS)

    for name, value in (bindings or {}).items():
        if name in scope:
            raise ScopeError(name, f"cannot redefine evaluation global '{name}'")

        if not name.isidentifier() or keyword.iskeyword(name):
            raise ScopeError(name, f"invalid binding name '{name}'")

        scope[name] = value

    return scope


class ExpressionEvaluator:
    """Evaluates templates and scripts through a script host."""

    def __init__(self, host: Optional[ScriptHost] = None):
        self._host = host or PythonScriptHost()

    @property
    def host(self) -> ScriptHost:
        return self._host

    async def run_script(
        self, source: str, bindings: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Runs a script with the builtins and bindings in scope.

        Args:
            source: Script source
            bindings: Additional names visible to the script

        Returns:
            Whatever the script returns, awaited if asynchronous
        """
        scope = create_scope(bindings)
        logger.debug("running_script", extra={"bindings": sorted(scope)})
        return await self._host.run_script(source, scope)

    async def parse_expression(
        self, raw: str, bindings: Optional[Mapping[str, Any]] = None
    ) -> str:
        """
        Resolves every `{{ }}` span of a template.

        Args:
            raw: Template text
            bindings: Additional names visible to the expressions

        Returns:
            The template with each span replaced by its stringified value;
            the input itself when it holds no spans

        Raises:
            TemplateSyntaxError: If a span is never closed
            ScopeError: If a binding name is not allowed
        """
        scope = create_scope(bindings)

        if not has_expressions(raw):
            return raw

        output: List[str] = []

        for segment in scan_template(raw):
            if segment.is_expression:
                value = await self._host.evaluate_expression(segment.text, scope)
                output.append(stringify(value))
            else:
                output.append(segment.text)

        return "".join(output)
