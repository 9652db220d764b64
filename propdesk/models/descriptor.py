"""Backend query descriptor models for propdesk.

The filter translator produces a QueryDescriptor; a backend collaborator
executes it and answers with a PageResult. The descriptor is abstract, but
it can be rendered as PostgREST query parameters, the wire format of the
hosted backend.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ConditionOp = Literal["eq", "neq", "gt", "gte", "lt", "lte", "ilike"]

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        value = value.replace(char, LIKE_ESCAPE + char)
    return value


class Condition(BaseModel):
    """A single column constraint.

    For ``ilike`` the value is a SQL LIKE pattern with ``%`` and ``_``
    wildcards; a backslash makes the next character literal.
    """

    model_config = ConfigDict(frozen=True)

    column: str
    op: ConditionOp
    value: Union[float, str]


class TextMatch(BaseModel):
    """Case-insensitive substring match of ``pattern`` across ``columns``, OR'ed."""

    model_config = ConfigDict(frozen=True)

    columns: list[str]
    pattern: str


class OrderBy(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    ascending: bool = True


class QueryDescriptor(BaseModel):
    """Filter, sort and pagination request for one page of rows.

    Attributes:
        conditions: Column constraints, all of which must hold.
        text_match: Optional free-text match.
        order: Optional ordering; None leaves the backend default order.
        offset: Index of the first requested row.
        limit: Number of requested rows.
    """

    model_config = ConfigDict(frozen=True)

    conditions: list[Condition] = Field(default_factory=list)
    text_match: Optional[TextMatch] = None
    order: Optional[OrderBy] = None
    offset: int = 0
    limit: int = 10

    def to_postgrest_params(self) -> list[tuple[str, str]]:
        """Render the descriptor as PostgREST query parameters.

        LIKE wildcards are written as ``*``, which PostgREST accepts in URLs.

        Returns:
            Ordered (name, value) pairs, ready for URL encoding.
        """
        params: list[tuple[str, str]] = []
        for cond in self.conditions:
            value = _format_value(cond.value, like=cond.op == "ilike")
            params.append((cond.column, f"{cond.op}.{value}"))

        if self.text_match and self.text_match.columns:
            pattern = f"*{escape_like(self.text_match.pattern)}*"
            ors = ",".join(f"{col}.ilike.{pattern}" for col in self.text_match.columns)
            params.append(("or", f"({ors})"))

        if self.order:
            direction = "asc" if self.order.ascending else "desc"
            params.append(("order", f"{self.order.column}.{direction}"))

        params.append(("limit", str(self.limit)))
        params.append(("offset", str(self.offset)))
        return params


class PageResult(BaseModel):
    """One page of rows plus the total number of matching rows."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int = 0


def _format_value(value: float | str, like: bool = False) -> str:
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if like:
        return value.replace("%", "*")
    return value
