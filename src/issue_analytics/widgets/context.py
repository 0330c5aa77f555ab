"""
State threaded through one dashboard evaluation.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from ..query.types import Item, QueryCache, SearchClient


@dataclass(frozen=True)
class EvaluationContext:
    """
    Evaluation context for widgets.

    The query cache and user data are shared by every context derived from
    the same root. `item` and `value` belong to a single sub-evaluation:
    `with_item` and `with_value` return narrowed copies and never change the
    context they were called on.
    """

    client: SearchClient
    """Search client used by query widgets."""

    query_cache: QueryCache = field(default_factory=dict)
    """Fetched results keyed by resolved query string."""

    userdata: Dict[str, Any] = field(default_factory=dict)
    """Free-form data for setup scripts and templates."""

    item: Optional[Item] = None
    """The search item a table cell is evaluated for."""

    value: Optional[Union[int, float, str]] = None
    """The resolved value a widget's metadata is evaluated for."""

    narrowed: bool = False
    """Whether this context is scoped to a single item or value."""

    def with_item(self, item: Item) -> EvaluationContext:
        return dataclasses.replace(self, item=item, value=None, narrowed=True)

    def with_value(self, value: Union[int, float, str]) -> EvaluationContext:
        return dataclasses.replace(self, item=None, value=value, narrowed=True)

    def scope(self) -> Dict[str, Any]:
        """Returns the names visible to templates and scripts."""
        bindings: Dict[str, Any] = {
            "github": self.client,
            "userdata": self.userdata,
        }

        if not self.narrowed:
            bindings["querycache"] = self.query_cache

        if self.item is not None:
            bindings["item"] = self.item

        if self.narrowed and self.item is None:
            bindings["value"] = self.value

        return bindings
