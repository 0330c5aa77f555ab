"""
Configuration models for dashboard files.

These mirror the YAML/JSON layout one to one. Unknown keys are rejected, and
keys that select a widget's data source are mutually exclusive.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Scalar = Union[str, int, float]


def _key_list(keys: List[str]) -> str:
    quoted = [f"'{key}'" for key in keys]
    if len(quoted) < 2:
        return "".join(quoted)
    return ", ".join(quoted[:-1]) + " or " + quoted[-1]


def _require_one_of(model: BaseModel, keys: List[str]) -> None:
    found = [key for key in keys if getattr(model, key) is not None]

    if not found:
        raise ValueError(f"expected one of: {_key_list(keys)}")

    if len(found) > 1:
        raise ValueError(f"expected only one of: {_key_list(found)}")


class StrictConfig(BaseModel):
    """Base for configuration models that reject unknown keys."""

    model_config = ConfigDict(extra="forbid")


# ============================================================
# Widgets
# ============================================================


class StringCellConfig(StrictConfig):
    """A string widget without a type tag, as used in table headers and cells."""

    title: Optional[str] = None
    url: Optional[str] = None
    color: Optional[str] = None
    align: Optional[str] = None
    value: Optional[Scalar] = None
    script: Optional[str] = None

    @model_validator(mode="after")
    def check_source(self) -> StringCellConfig:
        _require_one_of(self, ["value", "script"])
        return self


class StringWidgetConfig(StringCellConfig):
    type: Literal["string"]


class NumberWidgetConfig(StrictConfig):
    type: Literal["number"]
    title: Optional[str] = None
    url: Optional[str] = None
    color: Optional[str] = None
    value: Optional[Scalar] = None
    script: Optional[str] = None
    issue_query: Optional[str] = None

    @model_validator(mode="after")
    def check_source(self) -> NumberWidgetConfig:
        _require_one_of(self, ["issue_query", "value", "script"])
        return self


class GraphElementConfig(StrictConfig):
    title: Optional[str] = None
    url: Optional[str] = None
    color: Optional[str] = None
    value: Optional[Scalar] = None
    issue_query: Optional[str] = None

    @model_validator(mode="after")
    def check_source(self) -> GraphElementConfig:
        _require_one_of(self, ["issue_query", "value"])
        return self


class GraphWidgetConfig(StrictConfig):
    type: Literal["graph"]
    title: Optional[str] = None
    url: Optional[str] = None
    elements: List[GraphElementConfig]


class QueryTableFieldConfig(StrictConfig):
    title: Optional[str] = None
    property: Optional[str] = None
    value: Optional[str] = None

    @model_validator(mode="after")
    def check_source(self) -> QueryTableFieldConfig:
        _require_one_of(self, ["property", "value"])
        return self


Cell = Union[Scalar, StringCellConfig]


class TableWidgetConfig(StrictConfig):
    type: Literal["table"]
    title: Optional[str] = None
    url: Optional[str] = None

    # Query tables
    issue_query: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=0)
    fields: Optional[List[Union[QueryTableFieldConfig, str]]] = None

    # Static tables
    headers: Optional[Union[List[Cell], Cell]] = None
    elements: Optional[List[Union[List[Cell], Cell]]] = None

    @model_validator(mode="after")
    def check_source(self) -> TableWidgetConfig:
        _require_one_of(self, ["issue_query", "elements"])

        if self.issue_query is not None:
            unexpected = [key for key in ("headers",) if getattr(self, key) is not None]
        else:
            unexpected = [key for key in ("limit", "fields") if getattr(self, key) is not None]

        if unexpected:
            raise ValueError(f"unexpected option '{unexpected[0]}'")

        return self


WidgetConfig = Annotated[
    Union[NumberWidgetConfig, StringWidgetConfig, GraphWidgetConfig, TableWidgetConfig],
    Field(discriminator="type"),
]


# ============================================================
# Dashboard
# ============================================================


class SectionConfig(StrictConfig):
    title: Optional[str] = None
    description: Optional[str] = None
    widgets: List[WidgetConfig] = Field(default_factory=list)


class OutputConfig(BaseModel):
    """
    Renderer settings.

    Only `format` is interpreted here; renderers read their own keys.
    """

    model_config = ConfigDict(extra="allow")

    format: str
    filename: Optional[str] = None


class AnalyticsConfig(StrictConfig):
    title: Optional[str] = None
    description: Optional[str] = None
    setup: Optional[str] = None
    shutdown: Optional[str] = None
    output: OutputConfig
    sections: List[SectionConfig] = Field(default_factory=list)
