"""Translation of parsed search queries into backend query descriptors.

The FilterTranslator is where raw filter values meet column types:
numbers are parsed, dates are validated and text equality becomes a
case-insensitive substring match. Filters that cannot be translated are
skipped individually so that the rest of the query still applies; this
keeps saved searches usable after a column is removed.
"""

from __future__ import annotations

import itertools
import logging
import math
import threading
from datetime import datetime
from typing import Sequence

from propdesk.models.descriptor import (
    Condition,
    OrderBy,
    QueryDescriptor,
    TextMatch,
    escape_like,
)
from propdesk.models.query import Filter, ParsedQuery, SortDirective
from propdesk.models.schema import SearchColumn

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

_RELATIONAL_OPS = {
    "!=": "neq",
    ">": "gt",
    ">=": "gte",
    "<": "lt",
    "<=": "lte",
}


class FilterTranslator:
    """Builds QueryDescriptors for one column schema.

    Example usage:
        translator = FilterTranslator(columns, default_sort=SortDirective(column="id", direction="asc"))
        descriptor = translator.translate(parse_query(text, columns), page=2)

    Args:
        columns: Column schema the queries were parsed against.
        default_sort: Ordering used when the query has no usable sort.
    """

    def __init__(
        self,
        columns: Sequence[SearchColumn],
        default_sort: SortDirective | None = None,
    ):
        self._columns = {column.key: column for column in columns}
        self._search_fields = [column.key for column in columns if column.is_searchable]
        self._default_sort = default_sort

    @property
    def search_fields(self) -> list[str]:
        return list(self._search_fields)

    def translate(
        self,
        parsed: ParsedQuery,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> QueryDescriptor:
        """Translate a parsed query into a descriptor for one page.

        Args:
            parsed: Output of the query parser.
            page: 1-based page number.
            page_size: Rows per page.

        Returns:
            QueryDescriptor with conditions, free-text match, order,
            offset and limit.

        Raises:
            ValueError: If page or page_size is less than 1.
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")

        conditions: list[Condition] = []
        for parsed_filter in parsed.filters:
            condition = self.translate_filter(parsed_filter)
            if condition is not None:
                conditions.append(condition)

        text_match = None
        search_text = (parsed.text_search or "").strip()
        if search_text and self._search_fields:
            text_match = TextMatch(columns=self._search_fields, pattern=search_text)

        return QueryDescriptor(
            conditions=conditions,
            text_match=text_match,
            order=self._resolve_order(parsed.sort),
            offset=(page - 1) * page_size,
            limit=page_size,
        )

    def translate_filter(self, parsed_filter: Filter) -> Condition | None:
        """Translate a single filter.

        Returns:
            The condition, or None if the column is unknown or the value
            does not fit the column type.
        """
        column = self._columns.get(parsed_filter.column)
        if column is None:
            logger.debug("Skipping filter on unknown column %r", parsed_filter.column)
            return None

        value: float | str = parsed_filter.value
        if column.type == "number":
            try:
                value = float(parsed_filter.value)
                if not math.isfinite(value):
                    raise ValueError(parsed_filter.value)
            except ValueError:
                logger.debug(
                    "Skipping non-numeric value %r for column %r",
                    parsed_filter.value, column.key,
                )
                return None
        elif column.type == "date" and not _is_iso_date(parsed_filter.value):
            logger.debug(
                "Skipping invalid date %r for column %r", parsed_filter.value, column.key,
            )
            return None

        if parsed_filter.operator == "=":
            if column.type == "text":
                pattern = f"%{escape_like(parsed_filter.value)}%"
                return Condition(column=column.key, op="ilike", value=pattern)
            return Condition(column=column.key, op="eq", value=value)

        return Condition(column=column.key, op=_RELATIONAL_OPS[parsed_filter.operator], value=value)

    def _resolve_order(self, sort: SortDirective | None) -> OrderBy | None:
        if sort is not None:
            if sort.column in self._columns:
                return OrderBy(column=sort.column, ascending=sort.direction == "asc")
            logger.debug("Ignoring sort on unknown column %r", sort.column)
        if self._default_sort is not None:
            return OrderBy(
                column=self._default_sort.column,
                ascending=self._default_sort.direction == "asc",
            )
        return None


def _is_iso_date(value: str) -> bool:
    """Check for a real calendar date written as yyyy-MM-dd."""
    if len(value) != 10:
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


class RequestSequencer:
    """Tags backend requests so that out-of-order responses can be dropped.

    Each call to issue() returns a larger tag than the previous one; a
    response is current only if its tag is the latest issued.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, tag: int) -> bool:
        return tag == self._latest
