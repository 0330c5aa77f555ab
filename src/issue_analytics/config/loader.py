"""
Dashboard configuration loading.

Parses a JSON or YAML document, validates it against the configuration
models and builds the templated widget tree.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Union

import yaml
from pydantic import ValidationError

from ..analytics import Analytics, Section
from ..errors import ConfigError
from ..query.types import QueryType
from ..widgets.model import (
    DEFAULT_QUERY_TABLE_LIMIT,
    GraphWidget,
    NumberWidget,
    QueryNumberWidget,
    QueryTableField,
    QueryTableWidget,
    ScriptNumberWidget,
    ScriptStringWidget,
    StringWidget,
    TableWidget,
    Widget,
)
from .models import (
    AnalyticsConfig,
    Cell,
    GraphElementConfig,
    GraphWidgetConfig,
    NumberWidgetConfig,
    OutputConfig,
    SectionConfig,
    StringCellConfig,
    TableWidgetConfig,
    WidgetConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardConfig:
    """A loaded dashboard and its renderer settings."""

    analytics: Analytics
    output: OutputConfig


def _parse_document(content: str) -> Any:
    """Parses JSON, falling back to YAML."""
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as error:
        raise ConfigError(f"cannot parse configuration: {error}") from error


def _describe_validation_error(error: ValidationError) -> ConfigError:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")

    if first.get("type") == "extra_forbidden" and first.get("loc"):
        message = f"unexpected option '{first['loc'][-1]}'"
    elif first.get("type") == "missing" and first.get("loc"):
        message = f"missing required option '{first['loc'][-1]}'"
    elif message.startswith("Value error, "):
        message = message[len("Value error, ") :]

    return ConfigError(message, location or None)


# ============================================================
# Widget Construction
# ============================================================


def _string_widget(config: Union[Cell, StringCellConfig]) -> Widget:
    if not isinstance(config, StringCellConfig):
        return StringWidget(value=str(config))

    if config.script is not None:
        return ScriptStringWidget(
            title=config.title,
            url=config.url,
            script=config.script,
            align=config.align,
            color=config.color,
        )

    return StringWidget(
        title=config.title,
        url=config.url,
        value=str(config.value),
        align=config.align,
        color=config.color,
    )


def _number_widget(config: Union[NumberWidgetConfig, GraphElementConfig]) -> Widget:
    if config.issue_query is not None:
        return QueryNumberWidget(
            title=config.title,
            url=config.url,
            query_type=QueryType.ISSUE,
            query=config.issue_query,
            color=config.color,
        )

    script = getattr(config, "script", None)
    if script is not None:
        return ScriptNumberWidget(
            title=config.title, url=config.url, script=script, color=config.color
        )

    return NumberWidget(
        title=config.title, url=config.url, value=config.value, color=config.color
    )


def _graph_widget(config: GraphWidgetConfig) -> Widget:
    return GraphWidget(
        title=config.title,
        url=config.url,
        elements=tuple(_number_widget(element) for element in config.elements),
    )


def _table_widget(config: TableWidgetConfig) -> Widget:
    if config.issue_query is not None:
        fields = None
        if config.fields is not None:
            fields = tuple(
                QueryTableField(property=f)
                if isinstance(f, str)
                else QueryTableField(title=f.title, property=f.property, value=f.value)
                for f in config.fields
            )

        return QueryTableWidget(
            title=config.title,
            url=config.url,
            query_type=QueryType.ISSUE,
            query=config.issue_query,
            limit=config.limit if config.limit is not None else DEFAULT_QUERY_TABLE_LIMIT,
            fields=fields,
        )

    headers: List[Widget] = []
    if isinstance(config.headers, list):
        headers = [_string_widget(header) for header in config.headers]
    elif config.headers is not None:
        headers = [_string_widget(config.headers)]

    rows = []
    for row in config.elements or []:
        cells = row if isinstance(row, list) else [row]
        rows.append(tuple(_string_widget(cell) for cell in cells))

    return TableWidget(
        title=config.title,
        url=config.url,
        headers=tuple(headers),
        elements=tuple(rows),
    )


def _widget(config: WidgetConfig) -> Widget:
    if config.type == "number":
        return _number_widget(config)
    if config.type == "string":
        return _string_widget(config)
    if config.type == "graph":
        return _graph_widget(config)
    return _table_widget(config)


def _section(config: SectionConfig) -> Section:
    return Section(
        title=config.title,
        description=config.description,
        widgets=tuple(_widget(widget) for widget in config.widgets),
    )


# ============================================================
# Entry Points
# ============================================================


def build_dashboard(raw: Any) -> DashboardConfig:
    """
    Validates a parsed configuration document and builds the dashboard.

    Raises:
        ConfigError: If the document does not describe a valid dashboard
    """
    if not isinstance(raw, dict):
        raise ConfigError("configuration must be an object")

    try:
        config = AnalyticsConfig.model_validate(raw)
    except ValidationError as error:
        raise _describe_validation_error(error) from error

    analytics = Analytics(
        title=config.title,
        description=config.description,
        sections=tuple(_section(section) for section in config.sections),
        setup=config.setup,
        shutdown=config.shutdown,
    )

    logger.debug(
        "loaded_configuration",
        extra={"sections": len(analytics.sections), "format": config.output.format},
    )

    return DashboardConfig(analytics=analytics, output=config.output)


def load_config(content: str) -> DashboardConfig:
    """Loads a dashboard from JSON or YAML text."""
    return build_dashboard(_parse_document(content))


def load_config_file(path: Union[str, Path]) -> DashboardConfig:
    """Loads a dashboard from a JSON or YAML file."""
    return load_config(Path(path).read_text(encoding="utf-8"))
