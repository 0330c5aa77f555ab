"""
Date adjustment expressions.

A date expression is a base followed by any number of adjustments:

    <base> (<op> <amount> <unit>)*

The base is one of:
- `startOfMonth`: the first instant of the current UTC month
- `YYYY-MM-DDTHH:MM:SSZ`: an explicit UTC date and time
- `YYYY-MM-DD`: an explicit date at midnight UTC
- `HH:MM:SS`: the current UTC date at the given time
- nothing: the current UTC instant; the first adjustment may then omit its
  operator, which defaults to `+`

An adjustment is `+` or `-` followed by either an integer and a unit
(`year`, `month`, `day`, `hour`, `minute`, `second`, optionally plural) or
an `HH:MM:SS` triple. Whitespace between tokens is ignored, so
`2020-04-08-1day+7 days` is valid.
"""

import re
from datetime import datetime as _datetime
from datetime import timezone
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from ..errors import DateParseError

_START_OF_MONTH = re.compile(r"startOfMonth")
_ISO_DATETIME = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})Z")
_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_TIME = re.compile(r"(\d{2}):(\d{2}):(\d{2})")

_WHITESPACE = re.compile(r"\s*")
_OPERATOR = re.compile(r"([+-])\s*")
_AMOUNT = re.compile(r"(\d+)\s*(year|month|day|hour|minute|second)s?\s*")
_TRIPLE = re.compile(r"(\d{2}):(\d{2}):(\d{2})\s*")

_UNITS = {
    "year": "years",
    "month": "months",
    "day": "days",
    "hour": "hours",
    "minute": "minutes",
    "second": "seconds",
}

Clock = Callable[[], _datetime]


def _utcnow() -> _datetime:
    return _datetime.now(timezone.utc)


class DateExpressionParser:
    """Parses a date adjustment expression into a UTC datetime."""

    def __init__(self, source: str, clock: Optional[Clock] = None):
        self._source = source
        self._clock = clock or _utcnow
        self._position = 0

    def parse(self) -> _datetime:
        """Parses the whole source and returns the adjusted timestamp."""
        self._skip_whitespace()

        value, implicit_operator = self._parse_base()

        while True:
            self._skip_whitespace()
            if self._is_at_end():
                break

            operator = self._match(_OPERATOR)
            if operator is not None:
                sign = -1 if operator.group(1) == "-" else 1
            elif implicit_operator:
                sign = 1
            else:
                raise DateParseError(
                    f"operator expected, got '{self._remaining()}'",
                    self._position,
                    self._source,
                )

            implicit_operator = False
            value = value + self._parse_adjustment(sign)

        return value.astimezone(timezone.utc)

    # ============================================================
    # Grammar
    # ============================================================

    def _parse_base(self) -> tuple[_datetime, bool]:
        """Returns the base timestamp and whether an operator may be omitted."""
        if self._match(_START_OF_MONTH):
            now = self._clock()
            return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0), False

        match = self._match(_ISO_DATETIME)
        if match:
            year, month, day, hour, minute, second = (int(g) for g in match.groups())
            return _datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc), False

        match = self._match(_ISO_DATE)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return _datetime(year, month, day, tzinfo=timezone.utc), False

        match = self._match(_TIME)
        if match:
            hour, minute, second = (int(g) for g in match.groups())
            now = self._clock()
            return now.replace(hour=hour, minute=minute, second=second, microsecond=0), False

        return self._clock(), True

    def _parse_adjustment(self, sign: int) -> relativedelta:
        match = self._match(_AMOUNT)
        if match:
            unit = _UNITS[match.group(2)]
            return relativedelta(**{unit: sign * int(match.group(1))})

        match = self._match(_TRIPLE)
        if match:
            hours, minutes, seconds = (int(g) for g in match.groups())
            return relativedelta(
                hours=sign * hours, minutes=sign * minutes, seconds=sign * seconds
            )

        raise DateParseError(
            f"date adjustment expected, got '{self._remaining()}'",
            self._position,
            self._source,
        )

    # ============================================================
    # Scanning Helpers
    # ============================================================

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _remaining(self) -> str:
        return self._source[self._position :]

    def _skip_whitespace(self) -> None:
        self._match(_WHITESPACE)

    def _match(self, pattern: re.Pattern) -> Optional[re.Match]:
        match = pattern.match(self._source, self._position)
        if match:
            self._position = match.end()
        return match


def parse_date_expression(source: Optional[str] = None, clock: Optional[Clock] = None) -> _datetime:
    """
    Parses a date adjustment expression.

    Args:
        source: The expression; None or empty means "now"
        clock: Optional callable returning the current UTC time

    Returns:
        A timezone-aware UTC datetime

    Raises:
        DateParseError: If the expression cannot be parsed
    """
    return DateExpressionParser(str(source) if source is not None else "", clock).parse()


def date(source: Optional[str] = None) -> str:
    """Returns the expression's date as YYYY-MM-DD."""
    return parse_date_expression(source).strftime("%Y-%m-%d")


def time(source: Optional[str] = None) -> str:
    """Returns the expression's time of day as HH:MM:SS."""
    return parse_date_expression(source).strftime("%H:%M:%S")


def datetime(source: Optional[str] = None) -> str:
    """Returns the expression as an ISO-8601 UTC timestamp."""
    return parse_date_expression(source).strftime("%Y-%m-%dT%H:%M:%SZ")
