"""Column schema models for propdesk.

A column schema describes the searchable columns of one CRM screen. It is
used both by the query parser (to resolve column names) and by the search
bar (to label chips and offer suggestions).
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from propdesk.models.query import SortDirective

ColumnType = Literal["text", "number", "date"]


class SearchColumn(BaseModel):
    """A column that can be filtered, sorted and suggested.

    Attributes:
        key: Backend column name (e.g., "price", "pf_id").
        label: Human-readable label (e.g., "PF ID"). Also accepted in
            queries with whitespace replaced by underscores.
        type: Value type, decides how the translator coerces values.
        searchable: Whether free-text search looks at this column.
            When unset, text columns are searchable.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    type: ColumnType = "text"
    searchable: Optional[bool] = None

    @property
    def is_searchable(self) -> bool:
        if self.searchable is not None:
            return self.searchable
        return self.type == "text"

    @property
    def label_token(self) -> str:
        """The label as it may be typed in a query ("Square Meter" -> "square_meter")."""
        return "_".join(self.label.lower().split())


class EntityDefinition(BaseModel):
    """Schema of one CRM screen (properties, projects, ...).

    Attributes:
        name: Identifier used on the command line and in storage keys.
        label: Display name.
        columns: Ordered column schema.
        default_sort: Ordering applied when the query carries no sort.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    columns: list[SearchColumn]
    default_sort: Optional[SortDirective] = None

    def get_column(self, key: str) -> SearchColumn | None:
        for column in self.columns:
            if column.key == key:
                return column
        return None


def columns_from_dicts(dicts: list[dict]) -> list[SearchColumn]:
    """Convert a list of dictionaries to SearchColumn objects.

    Args:
        dicts: List of dictionaries with column data.

    Returns:
        List of SearchColumn objects.
    """
    return [SearchColumn(**d) for d in dicts]


def entities_from_dicts(dicts: list[dict]) -> list[EntityDefinition]:
    """Convert a list of dictionaries to EntityDefinition objects.

    Args:
        dicts: List of dictionaries as returned by the get_entities hook.

    Returns:
        List of EntityDefinition objects.
    """
    return [EntityDefinition(**d) for d in dicts]
