"""Search bar controller for the propdesk TUI.

The controller owns the raw search text and everything derived from it:
the parsed query, the incomplete-filter flag, column suggestions, the
date-picker state and the debounce timer. Widgets forward events to it
(keystrokes, Enter, picks from menus) and render its state; it never
talks to a backend. A commit notifies ``on_change`` and ``on_apply``
with the raw text, and the caller decides what to fetch.

States:
    IDLE            nothing pending
    TYPING          input complete, debounce timer armed
    AWAITING_VALUE  trailing ``column=`` has no value, timer disarmed
    COMMITTING      callbacks are running
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Literal, Protocol, Sequence

from propdesk.models.query import ParsedQuery
from propdesk.models.saved_search import SavedSearch
from propdesk.models.schema import SearchColumn
from propdesk.tui.query_parser import (
    has_incomplete_filter,
    parse_filter_atom,
    parse_query,
    parse_sort_atom,
    resolve_column,
    tokenize,
)
from propdesk.tui.suggestions import (
    DEFAULT_SUGGESTION_LIMIT,
    active_filter,
    discovery_suggestions,
    splice_column,
    splice_date,
    suggest_columns,
)

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0

OPERATOR_GLYPHS = {
    "=": "=",
    "!=": "≠",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
}


class TimerHandle(Protocol):
    """Cancel handle returned by a scheduler (Textual's Timer fits)."""

    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class SearchState(str, Enum):
    IDLE = "idle"
    TYPING = "typing"
    AWAITING_VALUE = "awaiting_value"
    COMMITTING = "committing"


@dataclass(frozen=True)
class Chip:
    """A removable token shown under the search bar.

    Attributes:
        kind: What the chip removes ("text", "filter" or "sort").
        label: Display text.
        index: Filter index for filter chips, -1 otherwise.
    """

    kind: Literal["text", "filter", "sort"]
    label: str
    index: int = -1


class SearchBarController:
    """Coordinates search bar text, suggestions and commits.

    Args:
        columns: Column schema of the searched screen.
        scheduler: ``scheduler(delay, callback) -> handle``; the handle's
            ``stop()`` cancels the callback.
        on_change: Called with the raw text whenever the input is complete.
        on_apply: Called with the raw text on every commit.
        value: Initial raw text.
        debounce_seconds: Delay between the last complete keystroke and the commit.
        suggestion_limit: Maximum number of column suggestions.
        saved_searches: Saved searches supplied by the host application.
        on_save: ``on_save(name, query)`` for saving the current text.
        on_load: ``on_load(query)`` when a saved search is loaded.
        on_delete: ``on_delete(id)`` for deleting a saved search.
    """

    def __init__(
        self,
        columns: Sequence[SearchColumn],
        scheduler: Scheduler,
        on_change: Callable[[str], None] | None = None,
        on_apply: Callable[[str], None] | None = None,
        *,
        value: str = "",
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
        saved_searches: Sequence[SavedSearch] | None = None,
        on_save: Callable[[str, str], None] | None = None,
        on_load: Callable[[str], None] | None = None,
        on_delete: Callable[[str], None] | None = None,
    ):
        self._columns: tuple[SearchColumn, ...] = tuple(columns)
        self._scheduler = scheduler
        self._on_change = on_change
        self._on_apply = on_apply
        self._on_save = on_save
        self._on_load = on_load
        self._on_delete = on_delete
        self._debounce_seconds = debounce_seconds
        self._suggestion_limit = suggestion_limit
        self._saved_searches: list[SavedSearch] = list(saved_searches or [])

        self._timer: TimerHandle | None = None
        self._state = SearchState.IDLE
        self._focused = False

        self._text = value
        self._caret = len(value)
        self._applied_text = value
        self._parsed = ParsedQuery()
        self._incomplete = False
        self._suggestions: list[SearchColumn] = []
        self._suggestion_index = -1
        self._date_column: SearchColumn | None = None
        self._date_picker_open = False
        self._evaluate()

    # -- State ---------------------------------------------------------------

    @property
    def columns(self) -> tuple[SearchColumn, ...]:
        return self._columns

    @property
    def text(self) -> str:
        return self._text

    @property
    def caret(self) -> int:
        return self._caret

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def parsed(self) -> ParsedQuery:
        return self._parsed

    @property
    def incomplete(self) -> bool:
        return self._incomplete

    @property
    def applied_text(self) -> str:
        """Raw text of the last commit, the query currently in effect."""
        return self._applied_text

    @property
    def has_pending_commit(self) -> bool:
        return self._timer is not None

    @property
    def suggestions(self) -> list[SearchColumn]:
        return list(self._suggestions)

    @property
    def suggestion_index(self) -> int:
        return self._suggestion_index

    @property
    def date_column(self) -> SearchColumn | None:
        return self._date_column

    @property
    def date_picker_open(self) -> bool:
        return self._date_picker_open

    @property
    def saved_searches(self) -> list[SavedSearch]:
        return list(self._saved_searches)

    @saved_searches.setter
    def saved_searches(self, value: Sequence[SavedSearch]) -> None:
        self._saved_searches = list(value)

    # -- Typing --------------------------------------------------------------

    def set_text(self, text: str, caret: int | None = None) -> None:
        """Handle a keystroke: the input now holds ``text``.

        Complete input notifies ``on_change`` and re-arms the debounce
        timer. Incomplete input cancels the timer and stays silent, so the
        previously applied query remains in effect.
        """
        self._replace_text(text, caret)
        self._suggestion_index = -1

        if self._incomplete:
            self._cancel_timer()
            self._state = SearchState.AWAITING_VALUE
            logger.debug("Waiting for a value: %r", text)
            return

        self._state = SearchState.TYPING
        self._notify_change(text)
        self._arm_timer()

    def move_caret(self, caret: int) -> None:
        """Caret moved without editing; suggestions follow the caret."""
        self._caret = max(0, min(caret, len(self._text)))
        self._refresh_suggestions()
        self._refresh_date_state()

    def focus(self) -> None:
        """Input focused: an empty input shows every column."""
        self._focused = True
        if not self._text.strip():
            self._suggestions = discovery_suggestions(self._columns, self._suggestion_limit)
            self._suggestion_index = -1

    def click(self) -> None:
        self.focus()

    def blur(self) -> None:
        self._focused = False
        self.dismiss_suggestions()

    def dismiss_suggestions(self) -> None:
        self._suggestions = []
        self._suggestion_index = -1

    def submit(self) -> None:
        """Enter pressed.

        Selects the highlighted suggestion if there is one; otherwise commits
        immediately unless the trailing filter is still waiting for a value.
        """
        if self._suggestions and self._suggestion_index >= 0:
            self.select_suggestion(self._suggestions[self._suggestion_index])
            return
        if self._incomplete:
            return
        self._commit()

    # -- Suggestions ---------------------------------------------------------

    def highlight_next(self) -> None:
        if self._suggestions:
            self._suggestion_index = min(self._suggestion_index + 1, len(self._suggestions) - 1)

    def highlight_previous(self) -> None:
        if self._suggestions:
            self._suggestion_index = max(self._suggestion_index - 1, -1)

    def accept_highlighted(self) -> bool:
        """Tab pressed: select the highlighted suggestion.

        Returns:
            True if a suggestion was selected.
        """
        if self._suggestions and self._suggestion_index >= 0:
            self.select_suggestion(self._suggestions[self._suggestion_index])
            return True
        return False

    def select_suggestion(self, column: SearchColumn) -> None:
        """Insert ``<key>=`` over the fragment at the caret.

        The caret lands right after ``=``. The new text goes through the
        keystroke path, so the now-incomplete filter cancels any pending
        commit. Date columns open the date picker.
        """
        new_text, caret = splice_column(self._text, self._caret, column)
        self.set_text(new_text, caret)
        self._suggestions = []
        if column.type == "date":
            self._date_column = column
            self._date_picker_open = True

    # -- Date picker ---------------------------------------------------------

    def open_date_picker(self) -> None:
        if self._date_column is not None:
            self._date_picker_open = True

    def close_date_picker(self) -> None:
        self._date_picker_open = False

    def select_date(self, day: date) -> None:
        """Write ``day`` as ``yyyy-MM-dd`` into the active date filter.

        Closes the picker and goes through the keystroke path, so the
        usual debounce applies.
        """
        column = self._date_column
        if column is None:
            return
        new_text, caret = splice_date(self._text, self._caret, column, day)
        self.set_text(new_text, caret)
        self._date_picker_open = False

    # -- Immediate commits ---------------------------------------------------

    def select_sort(self, column: SearchColumn | str, direction: str) -> None:
        """Replace any sort atoms with ``sort:<key>:<direction>`` and commit."""
        key = column.key if isinstance(column, SearchColumn) else column
        resolved = resolve_column(key, self._columns)
        if resolved is not None:
            key = resolved.key
        atoms = [a for a in tokenize(self._text) if parse_sort_atom(a, self._columns) is None]
        atoms.append(f"sort:{key}:{direction.lower()}")
        self._replace_text(" ".join(atoms))
        self._commit_or_wait()

    def remove_filter(self, index: int) -> None:
        """Drop every filter atom on the column of filter ``index`` and commit.

        An index with no filter is ignored.
        """
        if not 0 <= index < len(self._parsed.filters):
            return
        target = self._parsed.filters[index].column

        def keep(atom: str) -> bool:
            if parse_sort_atom(atom, self._columns) is not None:
                return True
            parsed = parse_filter_atom(atom, self._columns)
            return parsed is None or parsed.column != target

        self._replace_text(" ".join(a for a in tokenize(self._text) if keep(a)))
        self._commit_or_wait()

    def remove_sort(self) -> None:
        atoms = [a for a in tokenize(self._text) if parse_sort_atom(a, self._columns) is None]
        self._replace_text(" ".join(atoms))
        self._commit_or_wait()

    def remove_text_search(self) -> None:
        if not self._parsed.text_search:
            return

        def structured(atom: str) -> bool:
            return (
                parse_sort_atom(atom, self._columns) is not None
                or parse_filter_atom(atom, self._columns) is not None
            )

        self._replace_text(" ".join(a for a in tokenize(self._text) if structured(a)))
        self._commit_or_wait()

    def clear(self) -> None:
        self._replace_text("")
        self._commit()

    def remove_chip(self, chip: Chip) -> None:
        if chip.kind == "filter":
            self.remove_filter(chip.index)
        elif chip.kind == "sort":
            self.remove_sort()
        else:
            self.remove_text_search()

    # -- Saved searches ------------------------------------------------------

    def save_search(self, name: str) -> bool:
        """Save the current text under ``name``.

        Returns:
            False without calling ``on_save`` when the name is blank.
        """
        name = name.strip()
        if not name:
            return False
        if self._on_save is not None:
            self._on_save(name, self._text)
        return True

    def load_search(self, query: str) -> None:
        """Replace the text with a saved query and commit it.

        A saved query ending in ``column=`` waits for the value instead.
        """
        self._replace_text(query)
        if self._on_load is not None:
            self._on_load(query)
        self._commit_or_wait()

    def delete_search(self, search_id: str) -> None:
        if self._on_delete is not None:
            self._on_delete(search_id)

    # -- Chips ---------------------------------------------------------------

    def column_label(self, key: str) -> str:
        for column in self._columns:
            if column.key == key:
                return column.label
        return key

    def chips(self) -> list[Chip]:
        """Chips for the current text: free text, then filters, then sort."""
        chips: list[Chip] = []
        if self._parsed.text_search:
            chips.append(Chip(kind="text", label=self._parsed.text_search))
        for i, f in enumerate(self._parsed.filters):
            glyph = OPERATOR_GLYPHS.get(f.operator, f.operator)
            chips.append(Chip(
                kind="filter",
                label=f"{self.column_label(f.column)}{glyph}{f.value}",
                index=i,
            ))
        if self._parsed.sort is not None:
            arrow = "↑" if self._parsed.sort.direction == "asc" else "↓"
            chips.append(Chip(
                kind="sort",
                label=f"Sort: {self.column_label(self._parsed.sort.column)} ({arrow})",
            ))
        return chips

    # -- Teardown ------------------------------------------------------------

    def dispose(self) -> None:
        """Cancel any pending commit (widget unmounted)."""
        self._cancel_timer()
        self._state = SearchState.IDLE

    # -- Internals -----------------------------------------------------------

    def _replace_text(self, text: str, caret: int | None = None) -> None:
        self._text = text
        self._caret = len(text) if caret is None else max(0, min(caret, len(text)))
        self._evaluate()

    def _evaluate(self) -> None:
        self._parsed = parse_query(self._text, self._columns)
        self._incomplete = has_incomplete_filter(self._text, self._columns)
        self._refresh_suggestions()
        self._refresh_date_state()

    def _refresh_suggestions(self) -> None:
        if not self._text.strip():
            if self._focused:
                self._suggestions = discovery_suggestions(self._columns, self._suggestion_limit)
            else:
                self._suggestions = []
        else:
            self._suggestions = suggest_columns(
                self._columns, self._text, self._caret, self._suggestion_limit,
            )
        if self._suggestion_index >= len(self._suggestions):
            self._suggestion_index = -1

    def _refresh_date_state(self) -> None:
        found = active_filter(self._columns, self._text, self._caret)
        if found is None or found[0].type != "date":
            self._date_column = None
            self._date_picker_open = False
            return
        column, value_empty = found
        self._date_column = column
        self._date_picker_open = value_empty

    def _notify_change(self, text: str) -> None:
        if self._on_change is not None:
            self._on_change(text)

    def _arm_timer(self) -> None:
        self._cancel_timer()
        self._timer = self._scheduler(self._debounce_seconds, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self._incomplete:
            return
        self._commit()

    def _commit_or_wait(self) -> None:
        if self._incomplete:
            self._cancel_timer()
            self._state = SearchState.AWAITING_VALUE
            logger.debug("Waiting for a value: %r", self._text)
            return
        self._commit()

    def _commit(self) -> None:
        self._cancel_timer()
        text = self._text
        self._state = SearchState.COMMITTING
        logger.debug("Committing query: %r", text)
        try:
            self._notify_change(text)
            if self._on_apply is not None:
                self._on_apply(text)
        finally:
            self._applied_text = text
            self._state = SearchState.IDLE
