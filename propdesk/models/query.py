"""Structured query models for propdesk.

These models are the output of the query parser. Values are kept as the
raw text the user typed; numeric and date coercion is the translator's
job.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Operator = Literal["=", "!=", ">", ">=", "<", "<="]
SortDirection = Literal["asc", "desc"]


class Filter(BaseModel):
    """One column/operator/value constraint.

    Attributes:
        column: Schema key of the filtered column.
        operator: Comparison operator.
        value: Raw value text.
    """

    model_config = ConfigDict(frozen=True)

    column: str
    operator: Operator = "="
    value: str


class SortDirective(BaseModel):
    """Requested ordering of the result rows."""

    model_config = ConfigDict(frozen=True)

    column: str
    direction: SortDirection = "desc"


class ParsedQuery(BaseModel):
    """Structured query parsed from search bar text.

    Attributes:
        filters: Filters in the order they appear in the raw text.
        sort: The last sort directive in the raw text, if any.
        text_search: Remaining atoms joined by single spaces, if any.
    """

    model_config = ConfigDict(frozen=True)

    filters: list[Filter] = Field(default_factory=list)
    sort: Optional[SortDirective] = None
    text_search: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.filters and self.sort is None and not self.text_search
