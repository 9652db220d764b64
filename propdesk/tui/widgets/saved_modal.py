"""Saved-search dialog for propdesk TUI.

Lists the saved searches of the current entity and lets the user save
the current query under a name, load one or delete one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from propdesk.models.saved_search import SavedSearch


def describe(saved: SavedSearch) -> str:
    """One-line description: name, query and when it was saved."""
    when = datetime.fromtimestamp(saved.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
    query = saved.query or "(empty query)"
    return f"{saved.name}  {query}  [{when}]"


class SavedSearchModal(ModalScreen[tuple[str, str] | None]):
    """Modal screen for managing saved searches.

    Dismisses with one of:
        ("save", name)    save the current query under ``name``
        ("load", id)      load the saved search ``id``
        ("delete", id)    delete the saved search ``id``
        None              cancelled

    A blank name is passed through; the caller decides how to report it.
    """

    DEFAULT_CSS = """
    SavedSearchModal {
        align: center middle;
    }

    #saved-modal-container {
        width: 80;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #saved-modal-title {
        text-style: bold;
        width: 100%;
        content-align: center middle;
        margin-bottom: 1;
    }

    .section-label {
        margin-top: 1;
        color: $text-muted;
        text-style: bold;
    }

    #saved-list {
        height: auto;
        max-height: 12;
    }

    .saved-buttons {
        margin-top: 1;
        height: 3;
        align: center middle;
    }

    .saved-buttons Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(
        self,
        saved_searches: Sequence[SavedSearch],
        current_query: str = "",
        *args,
        **kwargs,
    ):
        """Initialize the saved-search dialog.

        Args:
            saved_searches: Saved searches of the current entity.
            current_query: Query that "Save" would store.
        """
        super().__init__(*args, **kwargs)
        self._saved_searches = list(saved_searches)
        self._current_query = current_query

    def compose(self) -> ComposeResult:
        """Lay out the dialog."""
        with Vertical(id="saved-modal-container"):
            yield Static("Saved Searches", id="saved-modal-title")

            yield Label("Save current search", classes="section-label")
            yield Static(self._current_query or "(empty query)", id="saved-current")
            yield Input(placeholder="Name for this search...", id="saved-name")
            with Horizontal(classes="saved-buttons"):
                yield Button("Save", variant="primary", id="btn-save")

            yield Label("Saved", classes="section-label")
            if self._saved_searches:
                yield OptionList(
                    *(Option(describe(s), id=s.id) for s in self._saved_searches),
                    id="saved-list",
                )
            else:
                yield Static("No saved searches yet", id="saved-empty")
            with Horizontal(classes="saved-buttons"):
                yield Button("Load", variant="success", id="btn-load")
                yield Button("Delete", variant="error", id="btn-delete")
                yield Button("Close", variant="default", id="btn-cancel")

    def _selected_id(self) -> str | None:
        if not self._saved_searches:
            return None
        option_list = self.query_one("#saved-list", OptionList)
        if option_list.highlighted is None:
            return None
        return option_list.get_option_at_index(option_list.highlighted).id

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(("save", event.value))

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id is not None:
            self.dismiss(("load", event.option.id))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Route the dialog buttons."""
        button_id = event.button.id
        if button_id == "btn-save":
            self.dismiss(("save", self.query_one("#saved-name", Input).value))
        elif button_id in ("btn-load", "btn-delete"):
            selected = self._selected_id()
            if selected is None:
                self.notify("Select a saved search first", severity="warning")
                return
            self.dismiss(("load" if button_id == "btn-load" else "delete", selected))
        elif button_id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        """Close without a result."""
        self.dismiss(None)
