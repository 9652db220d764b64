"""Data models for propdesk."""

from propdesk.models.descriptor import (
    Condition,
    OrderBy,
    PageResult,
    QueryDescriptor,
    TextMatch,
)
from propdesk.models.query import Filter, ParsedQuery, SortDirective
from propdesk.models.saved_search import SavedSearch
from propdesk.models.schema import (
    EntityDefinition,
    SearchColumn,
    columns_from_dicts,
    entities_from_dicts,
)

__all__ = [
    "Condition",
    "EntityDefinition",
    "Filter",
    "OrderBy",
    "PageResult",
    "ParsedQuery",
    "QueryDescriptor",
    "SavedSearch",
    "SearchColumn",
    "SortDirective",
    "TextMatch",
    "columns_from_dicts",
    "entities_from_dicts",
]
