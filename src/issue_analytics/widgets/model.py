"""
Widget types.

Widgets are produced by the configuration loader in their templated form and
reduced by the WidgetEvaluator to static widgets: `number`, `string`, `graph`
and `table` whose text fields hold plain values instead of templates.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

from ..query.types import QueryType

WidgetKind = Literal[
    "number",
    "string",
    "query_number",
    "script_number",
    "script_string",
    "graph",
    "table",
    "query_table",
]

DEFAULT_QUERY_TABLE_LIMIT = 10


# ============================================================
# Widget Types
# ============================================================


@dataclass(frozen=True, kw_only=True)
class WidgetBase(ABC):
    """Base class for all widgets."""

    title: Optional[str] = None
    """Title template, or plain title once evaluated."""

    url: Optional[str] = None
    """Link template, or plain link once evaluated."""


@dataclass(frozen=True, kw_only=True)
class NumberWidget(WidgetBase):
    """A single numeric value."""

    value: Union[int, float, str]
    color: Optional[str] = None

    @property
    def kind(self) -> Literal["number"]:
        return "number"


@dataclass(frozen=True, kw_only=True)
class StringWidget(WidgetBase):
    """A single text value."""

    value: str
    align: Optional[str] = None
    color: Optional[str] = None

    @property
    def kind(self) -> Literal["string"]:
        return "string"


@dataclass(frozen=True, kw_only=True)
class QueryNumberWidget(WidgetBase):
    """The total number of items matching a search."""

    query: str
    query_type: QueryType = QueryType.ISSUE
    color: Optional[str] = None

    @property
    def kind(self) -> Literal["query_number"]:
        return "query_number"


@dataclass(frozen=True, kw_only=True)
class ScriptNumberWidget(WidgetBase):
    """A number computed by a script."""

    script: str
    color: Optional[str] = None

    @property
    def kind(self) -> Literal["script_number"]:
        return "script_number"


@dataclass(frozen=True, kw_only=True)
class ScriptStringWidget(WidgetBase):
    """A text value computed by a script."""

    script: str
    align: Optional[str] = None
    color: Optional[str] = None

    @property
    def kind(self) -> Literal["script_string"]:
        return "script_string"


@dataclass(frozen=True, kw_only=True)
class GraphWidget(WidgetBase):
    """Numeric values shown against each other."""

    elements: Sequence["Widget"] = ()

    @property
    def kind(self) -> Literal["graph"]:
        return "graph"


@dataclass(frozen=True, kw_only=True)
class TableWidget(WidgetBase):
    """A grid of number and string cells."""

    headers: Sequence["Widget"] = ()
    elements: Sequence[Sequence["Widget"]] = ()

    @property
    def kind(self) -> Literal["table"]:
        return "table"


@dataclass(frozen=True)
class QueryTableField:
    """
    A column of a query table.

    Either `property` names a key read from each item, or `value` is a
    template evaluated with the item bound as `item`.
    """

    title: Optional[str] = None
    property: Optional[str] = None
    value: Optional[str] = None

    def label(self) -> str:
        if self.title is not None:
            return self.title
        if self.value is not None:
            return self.value
        return self.property or ""


DEFAULT_QUERY_TABLE_FIELDS = {
    QueryType.ISSUE: (
        QueryTableField(title="Issue", property="number"),
        QueryTableField(title="Title", property="title"),
    ),
}


@dataclass(frozen=True, kw_only=True)
class QueryTableWidget(WidgetBase):
    """A table with one row per item matching a search."""

    query: str
    query_type: QueryType = QueryType.ISSUE
    limit: int = DEFAULT_QUERY_TABLE_LIMIT
    fields: Optional[Sequence[QueryTableField]] = None

    @property
    def kind(self) -> Literal["query_table"]:
        return "query_table"

    @property
    def resolved_fields(self) -> Sequence[QueryTableField]:
        """Configured fields, or the defaults for the query type."""
        if self.fields is not None:
            return self.fields
        return DEFAULT_QUERY_TABLE_FIELDS.get(self.query_type, ())


# ============================================================
# Unions
# ============================================================

Widget = Union[
    NumberWidget,
    StringWidget,
    QueryNumberWidget,
    ScriptNumberWidget,
    ScriptStringWidget,
    GraphWidget,
    TableWidget,
    QueryTableWidget,
]

ValueWidget = Union[NumberWidget, StringWidget]

StaticWidget = Union[NumberWidget, StringWidget, GraphWidget, TableWidget]
