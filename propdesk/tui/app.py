"""Main TUI application for propdesk.

This module provides the Textual-based terminal user interface for
searching one CRM entity. Layout:
header / search / suggestions / chips / results / status / footer.

The search bar behaviour lives in SearchBarController; the app forwards
widget events to it and renders its state. Committed queries are
translated into descriptors and fetched in a worker thread, tagged by a
RequestSequencer so that only the latest response is shown.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.events import Blur, Focus
from textual.message import Message as TextualMessage
from textual.widgets import DataTable, Input, OptionList, Static
from textual.widgets.input import Selection
from textual.widgets.option_list import Option

from propdesk.core.backend import Backend, BackendError
from propdesk.core.config import Config
from propdesk.core.saved_searches import SavedSearchError, SavedSearchStore
from propdesk.core.translator import FilterTranslator, RequestSequencer
from propdesk.models.descriptor import PageResult, QueryDescriptor
from propdesk.models.schema import EntityDefinition
from propdesk.tui.controller import SearchBarController
from propdesk.tui.query_parser import parse_query
from propdesk.tui.theme import register_nord_theme
from propdesk.tui.widgets.chip_bar import ChipBar
from propdesk.tui.widgets.footer import PropdeskFooter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------

class QueryInput(Input):
    """Single-line search input.

    Arrow keys and Tab drive the suggestion list instead of moving focus;
    focus changes are reported so the controller can show or hide
    discovery suggestions, and cursor moves so suggestions and the date
    picker follow the caret.
    """

    BINDINGS = [
        Binding("down", "suggestion('next')", "Next suggestion", show=False),
        Binding("up", "suggestion('previous')", "Previous suggestion", show=False),
        Binding("tab", "suggestion('accept')", "Accept suggestion", show=False),
    ]

    class SuggestionKey(TextualMessage):
        """Posted when a suggestion navigation key is pressed."""

        def __init__(self, key: str) -> None:
            super().__init__()
            self.key = key

    class FocusChanged(TextualMessage):
        """Posted when the input gains or loses focus."""

        def __init__(self, focused: bool) -> None:
            super().__init__()
            self.focused = focused

    class CaretMoved(TextualMessage):
        """Posted when the cursor moves, with or without an edit."""

        def __init__(self, caret: int) -> None:
            super().__init__()
            self.caret = caret

    def __init__(self, *args, **kwargs):
        kwargs.setdefault(
            "placeholder", "Search (column=value  price>=500000  sort:price:desc  text)...",
        )
        super().__init__(*args, **kwargs)

    def action_suggestion(self, key: str) -> None:
        self.post_message(self.SuggestionKey(key))

    def watch_selection(self, selection: Selection) -> None:
        self.post_message(self.CaretMoved(self.cursor_position))

    def on_focus(self, event: Focus) -> None:
        self.post_message(self.FocusChanged(True))

    def on_blur(self, event: Blur) -> None:
        self.post_message(self.FocusChanged(False))


class ResultsTable(DataTable):
    """Results of the current query, one column per schema column."""

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    def __init__(self, entity: EntityDefinition, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cursor_type = "row"
        self.zebra_stripes = True
        self._entity = entity

    def on_mount(self) -> None:
        for column in self._entity.columns:
            self.add_column(column.label, key=column.key)

    def show_rows(self, rows: list[dict[str, Any]]) -> None:
        self.clear()
        for row in rows:
            self.add_row(*(_format_cell(row.get(c.key)) for c in self._entity.columns))


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Main application
# ---------------------------------------------------------------------------

class PropdeskApp(App):
    """Main Textual application for searching a CRM entity.

    Attributes:
        entity: Schema of the searched entity.
        page: Current 1-based result page.
        total_count: Number of rows matching the applied query.
    """

    DEFAULT_CSS = """
    #header {
        height: 1;
        text-style: bold;
        color: $primary;
        padding: 0 1;
    }

    .panel {
        border: round $secondary;
        height: auto;
    }

    #search-panel {
        height: auto;
    }

    #suggestions {
        height: auto;
        max-height: 10;
        display: none;
    }

    #results-panel {
        height: 1fr;
    }

    #status {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("escape", "dismiss_suggestions", "Close suggestions", show=False),
        Binding("ctrl+l", "clear_query", "Clear", show=False),
        Binding("ctrl+s", "open_sort", "Sort", show=False),
        Binding("ctrl+o", "open_saved", "Saved searches", show=False),
        Binding("ctrl+t", "open_date", "Date", show=False),
        Binding("ctrl+n", "next_page", "Next page", show=False),
        Binding("ctrl+b", "previous_page", "Previous page", show=False),
        Binding("f12", "screenshot", "Screenshot", show=False),
    ]

    def __init__(
        self,
        entity: EntityDefinition,
        backend: Backend,
        config: Config | None = None,
        store: SavedSearchStore | None = None,
        query: str = "",
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.entity = entity
        self.config = config or Config()
        self.page = 1
        self.total_count = 0
        self._backend = backend
        self._store = store if store is not None else SavedSearchStore(None, entity.name)
        self._translator = FilterTranslator(entity.columns, default_sort=entity.default_sort)
        self._sequencer = RequestSequencer()
        self._query_text = query
        self._rows: list[dict[str, Any]] = []
        self._date_modal_open = False

        self.controller = SearchBarController(
            entity.columns,
            scheduler=self.set_timer,
            on_apply=self._on_apply,
            value=query,
            debounce_seconds=self.config.search.debounce_seconds,
            suggestion_limit=self.config.search.suggestion_limit,
            saved_searches=self._store.searches,
            on_save=self._on_save,
            on_delete=self._on_delete,
        )

        # Widget refs (set in on_mount)
        self._input: QueryInput | None = None
        self._suggestions: OptionList | None = None
        self._chip_bar: ChipBar | None = None
        self._table: ResultsTable | None = None
        self._status: Static | None = None
        self._footer: PropdeskFooter | None = None

    # -- Properties ----------------------------------------------------------

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self._rows

    @property
    def query_text(self) -> str:
        """Raw text of the query whose results are shown."""
        return self._query_text

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total_count / self.config.pagination.page_size))

    # -- Compose & Mount -----------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Static(f"propdesk - {self.entity.label}", id="header")
        with Vertical(id="search-panel", classes="panel"):
            yield QueryInput(value=self.controller.text, id="query-input")
            yield OptionList(id="suggestions")
            yield ChipBar(id="chips")
        with Vertical(id="results-panel", classes="panel"):
            yield ResultsTable(self.entity, id="results")
        yield Static("", id="status")
        yield PropdeskFooter(
            bindings=[
                ("^q", "Quit"),
                ("^s", "Sort"),
                ("^o", "Saved"),
                ("^t", "Date"),
                ("^n/^b", "Page"),
                ("^l", "Clear"),
            ],
        )

    def on_mount(self) -> None:
        """Handle app mount: apply theme, set up widgets, run the initial query."""
        register_nord_theme(self)

        self._input = self.query_one("#query-input", QueryInput)
        self._suggestions = self.query_one("#suggestions", OptionList)
        self._chip_bar = self.query_one("#chips", ChipBar)
        self._table = self.query_one("#results", ResultsTable)
        self._status = self.query_one("#status", Static)
        self._footer = self.query_one(PropdeskFooter)

        self.query_one("#search-panel").border_title = "Search"
        self.query_one("#results-panel").border_title = self.entity.label

        self._sync_view()
        self.run_query()
        self._input.focus()

    def on_unmount(self) -> None:
        self.controller.dispose()

    # -- Querying ------------------------------------------------------------

    def build_descriptor(self, raw: str, page: int = 1) -> QueryDescriptor:
        """Translate raw search text into a descriptor for ``page``."""
        parsed = parse_query(raw, self.entity.columns)
        return self._translator.translate(
            parsed, page=page, page_size=self.config.pagination.page_size,
        )

    def run_query(self) -> int:
        """Fetch the current page of the applied query.

        Returns:
            The request tag.
        """
        descriptor = self.build_descriptor(self._query_text, self.page)
        tag = self._sequencer.issue()
        logger.debug("Request %d for %s: %s", tag, self.entity.name, descriptor)
        self._fetch(tag, descriptor)
        return tag

    @work(thread=True)
    def _fetch(self, tag: int, descriptor: QueryDescriptor) -> None:
        try:
            result = self._backend.fetch_page(self.entity.name, descriptor)
        except BackendError as e:
            self.call_from_thread(self.show_error, tag, str(e))
            return
        self.call_from_thread(self.show_page, tag, result)

    def show_page(self, tag: int, result: PageResult) -> bool:
        """Display a backend response unless a newer request was issued.

        Returns:
            True if the response was current and displayed.
        """
        if not self._sequencer.is_current(tag):
            logger.debug("Discarding stale response %d", tag)
            return False
        self._rows = list(result.rows)
        self.total_count = result.total_count
        if self._table:
            self._table.show_rows(self._rows)
        self._update_status()
        return True

    def show_error(self, tag: int, message: str) -> None:
        """Report a failed request; previous rows stay visible."""
        if not self._sequencer.is_current(tag):
            return
        self.notify(f"Search failed: {message}", severity="error")

    def _on_apply(self, raw: str) -> None:
        self._query_text = raw
        self.page = 1
        self.run_query()
        self._update_status()

    # -- Saved searches ------------------------------------------------------

    def _on_save(self, name: str, query: str) -> None:
        saved = self._store.save(name, query)
        self.controller.saved_searches = self._store.searches
        self.notify(f"Saved search '{saved.name}'")

    def _on_delete(self, search_id: str) -> None:
        try:
            self._store.delete(search_id)
        except SavedSearchError as e:
            self.notify(str(e), severity="error")
            return
        self.controller.saved_searches = self._store.searches

    def _on_saved_modal_result(self, result: tuple[str, str] | None) -> None:
        if result is None:
            return
        action, value = result
        if action == "save":
            if not self.controller.save_search(value):
                self.notify("Please enter a name for this search", severity="warning")
        elif action == "load":
            saved = self._store.find(value)
            if saved is not None:
                self.controller.load_search(saved.query)
        elif action == "delete":
            self.controller.delete_search(value)
        self._sync_view()

    # -- View sync -----------------------------------------------------------

    def _sync_view(self) -> None:
        """Render controller state into the widgets."""
        if self._input is not None and self._input.value != self.controller.text:
            self._input.value = self.controller.text
            self._input.cursor_position = self.controller.caret
        self._update_suggestions()
        if self._chip_bar is not None:
            self._chip_bar.show_chips(self.controller.chips())
        self._update_status()
        if self.controller.date_picker_open and not self._date_modal_open:
            self.action_open_date()

    def _update_suggestions(self) -> None:
        if self._suggestions is None:
            return
        suggestions = self.controller.suggestions
        self._suggestions.clear_options()
        if not suggestions:
            self._suggestions.display = False
            return
        self._suggestions.add_options(
            Option(f"{column.label}  ({column.key}, {column.type})", id=column.key)
            for column in suggestions
        )
        self._suggestions.display = True
        index = self.controller.suggestion_index
        self._suggestions.highlighted = index if index >= 0 else None

    def _update_status(self) -> None:
        if self._status is not None:
            self._status.update(
                f"Page {self.page} of {self.page_count} | {self.total_count} results"
            )
        if self._footer is not None:
            self._footer.set_hint(self.search_hint())

    def search_hint(self) -> str:
        """What the search bar is waiting for, shown in the footer."""
        if self.controller.incomplete:
            return "Type a value to complete the filter"
        if self.controller.has_pending_commit:
            return "Enter to search now"
        return ""

    # -- Event handlers ------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "query-input" or event.value == self.controller.text:
            return
        self.controller.set_text(event.value, event.input.cursor_position)
        self._sync_view()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "query-input":
            self.controller.submit()
            self._sync_view()

    def on_query_input_suggestion_key(self, event: QueryInput.SuggestionKey) -> None:
        if event.key == "next":
            self.controller.highlight_next()
        elif event.key == "previous":
            self.controller.highlight_previous()
        elif not self.controller.accept_highlighted():
            self.screen.focus_next()
        self._sync_view()

    def on_query_input_caret_moved(self, event: QueryInput.CaretMoved) -> None:
        if self._input is None or self._input.value != self.controller.text:
            return
        if event.caret != self.controller.caret:
            self.controller.move_caret(event.caret)
            self._sync_view()

    def on_query_input_focus_changed(self, event: QueryInput.FocusChanged) -> None:
        if event.focused:
            self.controller.focus()
        else:
            self.controller.blur()
        self._update_suggestions()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        column = next(
            (c for c in self.controller.columns if c.key == event.option.id), None,
        )
        if column is not None:
            self.controller.select_suggestion(column)
            self._sync_view()
            if self._input:
                self._input.focus()

    def on_chip_bar_chip_removed(self, event: ChipBar.ChipRemoved) -> None:
        if event.chip is None:
            self.controller.clear()
        else:
            self.controller.remove_chip(event.chip)
        self._sync_view()

    # -- Actions -------------------------------------------------------------

    def action_quit(self) -> None:
        self.exit()

    def action_dismiss_suggestions(self) -> None:
        self.controller.dismiss_suggestions()
        self._update_suggestions()

    def action_clear_query(self) -> None:
        self.controller.clear()
        self._sync_view()

    def action_next_page(self) -> None:
        if self.page < self.page_count:
            self.page += 1
            self.run_query()

    def action_previous_page(self) -> None:
        if self.page > 1:
            self.page -= 1
            self.run_query()

    def action_screenshot(self) -> None:
        """Save a screenshot as SVG (Textual built-in)."""
        path = self.save_screenshot()
        self.notify(f"Screenshot saved: {path}")

    def action_open_sort(self) -> None:
        """Open the sort picker."""
        from propdesk.tui.widgets.sort_modal import SortModal

        self.push_screen(
            SortModal(self.entity.columns, self.controller.parsed.sort),
            callback=self._on_sort_modal_result,
        )

    def _on_sort_modal_result(self, result: tuple[str, str] | None) -> None:
        if result is None:
            return
        key, direction = result
        self.controller.select_sort(key, direction)
        self._sync_view()

    def action_open_date(self) -> None:
        """Open the date picker for the date filter at the caret."""
        from propdesk.tui.widgets.date_modal import DateModal

        column = self.controller.date_column
        if column is None:
            self.notify("Place the cursor on a date filter first", severity="warning")
            return
        self.controller.open_date_picker()
        self._date_modal_open = True
        self.push_screen(DateModal(column), callback=self._on_date_modal_result)

    def _on_date_modal_result(self, result: date | None) -> None:
        self._date_modal_open = False
        if result is None:
            self.controller.close_date_picker()
        else:
            self.controller.select_date(result)
        self._sync_view()
        if self._input:
            self._input.focus()

    def action_open_saved(self) -> None:
        """Open the saved-search dialog."""
        from propdesk.tui.widgets.saved_modal import SavedSearchModal

        self.push_screen(
            SavedSearchModal(self.controller.saved_searches, self.controller.text),
            callback=self._on_saved_modal_result,
        )


# ---------------------------------------------------------------------------
# Entry point helper
# ---------------------------------------------------------------------------

def run_tui(
    entity: EntityDefinition,
    backend: Backend,
    config: Config | None = None,
    store: SavedSearchStore | None = None,
    query: str = "",
) -> None:
    """Run the TUI application.

    Args:
        entity: Schema of the entity to search.
        backend: Collaborator that serves result pages.
        config: Loaded configuration (defaults if None).
        store: Saved-search storage (in-memory if None).
        query: Initial search text.
    """
    app = PropdeskApp(
        entity=entity,
        backend=backend,
        config=config,
        store=store,
        query=query,
    )
    app.run()
