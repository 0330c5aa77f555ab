"""
Scanner for `{{ expression }}` templates.

Splits template text into literal and expression segments. The first `}}`
after an opening `{{` closes the span; authors write `\\}` to put a literal
`}` inside an expression without closing it.
"""

from dataclasses import dataclass
from typing import List

from ..errors import TemplateSyntaxError

OPEN = "{{"
CLOSE = "}}"


@dataclass(frozen=True)
class Segment:
    """A piece of a scanned template."""

    text: str
    """Literal text, or the expression source for an expression segment."""

    is_expression: bool
    """Whether the text should be evaluated."""

    position: int
    """Offset of the segment in the template."""


class TemplateScanner:
    """Scans template text into segments."""

    def __init__(self, source: str):
        self._source = source
        self._position = 0
        self._segments: List[Segment] = []

    def scan(self) -> List[Segment]:
        """Scans the whole template and returns its segments in order."""
        while not self._is_at_end():
            start = self._source.find(OPEN, self._position)

            if start < 0:
                self._add_literal(self._source[self._position :], self._position)
                break

            if start > self._position:
                self._add_literal(self._source[self._position : start], self._position)

            self._position = start + len(OPEN)
            self._scan_expression(start)

        return self._segments

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _add_literal(self, text: str, position: int) -> None:
        self._segments.append(Segment(text, False, position))

    def _scan_expression(self, start_position: int) -> None:
        value: List[str] = []

        while not self._is_at_end():
            ch = self._source[self._position]

            if ch == "\\" and self._source.startswith("}", self._position + 1):
                value.append("}")
                self._position += 2
                continue

            if self._source.startswith(CLOSE, self._position):
                self._position += len(CLOSE)
                self._segments.append(Segment("".join(value), True, start_position))
                return

            value.append(ch)
            self._position += 1

        raise TemplateSyntaxError(
            f"unterminated expression, got '{self._source[start_position:]}'",
            start_position,
            self._source,
        )


def scan_template(source: str) -> List[Segment]:
    """
    Scans a template into literal and expression segments.

    Args:
        source: The template text

    Returns:
        Segments in source order

    Raises:
        TemplateSyntaxError: If a `{{` is never closed
    """
    return TemplateScanner(source).scan()


def has_expressions(source: str) -> bool:
    """Returns True when the text contains at least one `{{` opener."""
    return OPEN in source
