"""Backend collaborators for propdesk.

A backend receives a QueryDescriptor and answers with one PageResult. The
hosted CRM backend lives outside this package; MemoryBackend executes
descriptors over in-memory rows and serves the TUI demo mode, the CLI
``--records`` mode and the tests.
"""

from __future__ import annotations

import json
import logging
import operator
import re
from pathlib import Path
from typing import Any, Callable, Protocol

from propdesk.models.descriptor import LIKE_ESCAPE, Condition, PageResult, QueryDescriptor

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when a backend cannot serve a page."""


class Backend(Protocol):
    """Anything that can execute a QueryDescriptor for an entity."""

    def fetch_page(self, entity: str, descriptor: QueryDescriptor) -> PageResult: ...


_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a SQL LIKE pattern (``%`` and ``_`` wildcards) case-insensitively.

    A backslash makes the following character literal.
    """
    parts = []
    escaped = False
    for char in pattern:
        if escaped:
            parts.append(re.escape(char))
            escaped = False
        elif char == LIKE_ESCAPE:
            escaped = True
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def _matches(row: dict[str, Any], cond: Condition) -> bool:
    cell = row.get(cond.column)
    if cell is None:
        # SQL semantics: NULL never satisfies a comparison
        return False

    if cond.op == "ilike":
        return bool(like_to_regex(str(cond.value)).match(str(cell)))

    if isinstance(cond.value, float):
        try:
            cell = float(cell)
        except (TypeError, ValueError):
            return False
        return _COMPARATORS[cond.op](cell, cond.value)

    return _COMPARATORS[cond.op](str(cell), cond.value)


class MemoryBackend:
    """Executes descriptors over rows held in memory.

    Example usage:
        backend = MemoryBackend({"properties": rows})
        page = backend.fetch_page("properties", descriptor)
    """

    def __init__(self, rows: dict[str, list[dict[str, Any]]] | None = None):
        self._rows: dict[str, list[dict[str, Any]]] = {
            entity: list(entity_rows) for entity, entity_rows in (rows or {}).items()
        }

    @classmethod
    def from_json_file(cls, path: Path, entity: str) -> "MemoryBackend":
        """Load the rows of one entity from a JSON array file.

        Raises:
            BackendError: If the file is not a JSON array of objects.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BackendError(f"Cannot read records from {path}: {e}") from e
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise BackendError(f"Records file {path} must contain a JSON array of objects")
        return cls({entity: data})

    @property
    def entities(self) -> list[str]:
        return list(self._rows)

    def add_rows(self, entity: str, rows: list[dict[str, Any]]) -> None:
        self._rows.setdefault(entity, []).extend(rows)

    def fetch_page(self, entity: str, descriptor: QueryDescriptor) -> PageResult:
        """Filter, order and slice the rows of ``entity``.

        Raises:
            BackendError: If the entity has no rows registered.
        """
        if entity not in self._rows:
            raise BackendError(f"No records loaded for entity '{entity}'")

        rows = [
            row for row in self._rows[entity]
            if all(_matches(row, cond) for cond in descriptor.conditions)
        ]

        if descriptor.text_match is not None:
            needle = descriptor.text_match.pattern.casefold()
            columns = descriptor.text_match.columns
            rows = [
                row for row in rows
                if any(
                    row.get(col) is not None and needle in str(row.get(col)).casefold()
                    for col in columns
                )
            ]

        if descriptor.order is not None:
            column = descriptor.order.column
            present = [row for row in rows if row.get(column) is not None]
            missing = [row for row in rows if row.get(column) is None]
            present.sort(key=lambda row: _sort_key(row[column]), reverse=not descriptor.order.ascending)
            # NULLs last in both directions
            rows = present + missing

        total = len(rows)
        page = rows[descriptor.offset:descriptor.offset + descriptor.limit]
        logger.debug(
            "Served %d of %d %s rows (offset %d)", len(page), total, entity, descriptor.offset,
        )
        return PageResult(rows=page, total_count=total)


def _sort_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, bool):
        return (1, str(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value).casefold())
