"""
Dashboards and their evaluation.

An Analytics dashboard holds ordered sections, each holding ordered widgets.
`evaluate_analytics` runs the optional setup script, evaluates every section
strictly in order, resolves the dashboard's own title and description, runs
the optional shutdown script and returns a new, fully static dashboard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .expr.evaluator import ExpressionEvaluator
from .query.types import SearchClient
from .widgets.context import EvaluationContext
from .widgets.evaluator import WidgetEvaluator
from .widgets.model import StaticWidget, Widget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Section:
    """An ordered group of widgets."""

    title: Optional[str] = None
    description: Optional[str] = None
    widgets: Sequence[Widget] = ()


@dataclass(frozen=True)
class Analytics:
    """A dashboard: ordered sections plus optional setup and shutdown scripts."""

    title: Optional[str] = None
    description: Optional[str] = None
    sections: Sequence[Section] = ()
    setup: Optional[str] = None
    shutdown: Optional[str] = None


async def evaluate_section(
    section: Section,
    context: EvaluationContext,
    widgets: WidgetEvaluator,
) -> Section:
    """Evaluates a section's widgets in order, then its title and description."""
    evaluated: List[StaticWidget] = []

    for widget in section.widgets:
        evaluated.append(await widgets.evaluate(widget, context))

    return Section(
        title=await widgets.evaluate_expression(section.title, context),
        description=await widgets.evaluate_expression(section.description, context),
        widgets=tuple(evaluated),
    )


async def evaluate_analytics(
    analytics: Analytics,
    client: SearchClient,
    evaluator: Optional[ExpressionEvaluator] = None,
) -> Analytics:
    """
    Evaluates a whole dashboard.

    Args:
        analytics: The templated dashboard
        client: Search client used by query widgets
        evaluator: Optional expression evaluator (for a custom script host)

    Returns:
        A static dashboard without setup or shutdown scripts

    Raises:
        AnalyticsError: On the first failure; no partial result is returned
    """
    widgets = WidgetEvaluator(evaluator)
    context = EvaluationContext(client=client)

    logger.info(
        "evaluating_analytics",
        extra={"title": analytics.title, "sections": len(analytics.sections)},
    )

    if analytics.setup is not None:
        await widgets.expressions.run_script(analytics.setup, context.scope())

    sections = []
    for section in analytics.sections:
        sections.append(await evaluate_section(section, context, widgets))

    title = await widgets.evaluate_expression(analytics.title, context)
    description = await widgets.evaluate_expression(analytics.description, context)

    if analytics.shutdown is not None:
        await widgets.expressions.run_script(analytics.shutdown, context.scope())

    logger.info(
        "evaluated_analytics",
        extra={"title": title, "cached_queries": len(context.query_cache)},
    )

    return Analytics(title=title, description=description, sections=tuple(sections))
