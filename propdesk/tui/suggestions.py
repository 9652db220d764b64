"""Column suggestions for the propdesk search bar.

Works on the word fragment immediately before the caret: while the user
types a column name, matching columns are offered; once a separator has
been typed the user is entering a value and suggestions stop. Also holds
the text splicing used when a suggestion or a date is picked.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from propdesk.models.schema import SearchColumn
from propdesk.tui.query_parser import atom_spans, resolve_column, split_atom, unquote

DEFAULT_SUGGESTION_LIMIT = 10
DATE_FORMAT = "%Y-%m-%d"

_SEPARATORS = ("=", ":")


@dataclass(frozen=True)
class Fragment:
    """The part of the atom under the caret that lies before it.

    Attributes:
        text: Characters from the start of the atom up to the caret.
        start: Offset of the first fragment character in the raw text.
    """

    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def _clamp_caret(text: str, caret: int | None) -> int:
    if caret is None:
        return len(text)
    return max(0, min(caret, len(text)))


def current_fragment(text: str, caret: int | None = None) -> Fragment:
    """Return the atom fragment before the caret (end of text when caret is None).

    Atoms follow the parser, so a quoted value with spaces is one atom.
    """
    caret = _clamp_caret(text, caret)
    for start, end in atom_spans(text):
        if start < caret <= end:
            return Fragment(text=text[start:caret], start=start)
    return Fragment(text="", start=caret)


def _atom_end(text: str, offset: int) -> int:
    for start, end in atom_spans(text):
        if start <= offset <= end:
            return end
    return offset


def discovery_suggestions(
    columns: Sequence[SearchColumn],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[SearchColumn]:
    """All columns in schema order, capped, for an empty focused input."""
    return list(columns[:limit])


def suggest_columns(
    columns: Sequence[SearchColumn],
    text: str,
    caret: int | None = None,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[SearchColumn]:
    """Suggest columns for the word under the caret.

    Args:
        columns: Column schema, in display order.
        text: Raw search bar text.
        caret: Caret offset; None means end of text.
        limit: Maximum number of suggestions.

    Returns:
        Columns whose key or label starts with the fragment (case-insensitive),
        every column when the fragment is empty, and nothing when the
        fragment already holds a separator or the input is blank.
    """
    if not text.strip():
        return []

    fragment = current_fragment(text, caret).text.lower()
    if not fragment:
        return discovery_suggestions(columns, limit)
    if any(sep in fragment for sep in _SEPARATORS):
        return []

    matches = [
        column for column in columns
        if column.key.lower().startswith(fragment)
        or column.label.lower().startswith(fragment)
    ]
    return matches[:limit]


def splice_column(
    text: str,
    caret: int | None,
    column: SearchColumn,
) -> tuple[str, int]:
    """Replace the fragment before the caret with ``<key>=``.

    Returns:
        The new text and the caret offset right after the ``=``.
    """
    fragment = current_fragment(text, caret)
    insert = f"{column.key}="
    new_text = text[:fragment.start] + insert + text[fragment.end:]
    return new_text, fragment.start + len(insert)


def active_filter(
    columns: Sequence[SearchColumn],
    text: str,
    caret: int | None = None,
) -> tuple[SearchColumn, bool] | None:
    """Find the filter being edited at the caret.

    Returns:
        (column, value_is_empty) when the fragment before the caret is a
        filter on a known column, otherwise None.
    """
    parts = split_atom(current_fragment(text, caret).text)
    if parts is None:
        return None
    name, _, value = parts
    column = resolve_column(name, columns)
    if column is None:
        return None
    return column, not unquote(value).strip()


def splice_date(
    text: str,
    caret: int | None,
    column: SearchColumn,
    day: date,
) -> tuple[str, int]:
    """Write ``<key>=yyyy-MM-dd`` over the filter atom at the caret.

    Any partial value is replaced; text after the atom is kept.

    Returns:
        The new text and the caret offset right after the date.
    """
    fragment = current_fragment(text, caret)
    atom_end = _atom_end(text, fragment.end)
    insert = f"{column.key}={day.strftime(DATE_FORMAT)}"
    rest = text[atom_end:].strip()
    new_text = text[:fragment.start] + insert + (f" {rest}" if rest else "")
    return new_text, fragment.start + len(insert)
