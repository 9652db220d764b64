"""Sort picker modal for propdesk TUI.

This module provides a modal dialog for choosing the sort column and
direction, driven by the entity's column schema.
"""

from __future__ import annotations

from typing import Sequence

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, RadioButton, RadioSet, Static

from propdesk.models.query import SortDirective
from propdesk.models.schema import SearchColumn


class SortModal(ModalScreen[tuple[str, str] | None]):
    """Modal screen for picking a sort.

    Displays a radio button for each column and one per direction.

    On Apply: dismisses with (column_key, "asc" | "desc")
    On Cancel/Escape: dismisses with None.
    """

    DEFAULT_CSS = """
    SortModal {
        align: center middle;
    }

    #sort-modal-container {
        width: 50;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #sort-modal-title {
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

    #sort-modal-buttons {
        margin-top: 1;
        height: 3;
        align: center middle;
    }

    #sort-modal-buttons Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(
        self,
        columns: Sequence[SearchColumn],
        current_sort: SortDirective | None = None,
        *args,
        **kwargs,
    ):
        """Initialize the sort modal.

        Args:
            columns: Column schema to choose from.
            current_sort: Sort of the current query, pre-selected if set.
        """
        super().__init__(*args, **kwargs)
        self._columns = list(columns)
        self._current_sort = current_sort

    def compose(self) -> ComposeResult:
        """Lay out the dialog."""
        current_key = self._current_sort.column if self._current_sort else None
        current_direction = self._current_sort.direction if self._current_sort else "desc"

        with Vertical(id="sort-modal-container"):
            yield Static("Sort By", id="sort-modal-title")

            yield Label("Column", classes="section-label")
            with RadioSet(id="sort-column"):
                for i, column in enumerate(self._columns):
                    selected = column.key == current_key or (current_key is None and i == 0)
                    yield RadioButton(column.label, value=selected, id=f"col-{column.key}")

            yield Label("Direction", classes="section-label")
            with RadioSet(id="sort-direction"):
                yield RadioButton("Ascending", value=current_direction == "asc", id="dir-asc")
                yield RadioButton("Descending", value=current_direction == "desc", id="dir-desc")

            with Horizontal(id="sort-modal-buttons"):
                yield Button("Apply", variant="primary", id="btn-apply")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Route the dialog buttons."""
        if event.button.id == "btn-apply":
            self._apply()
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        """Close without a result."""
        self.dismiss(None)

    def _apply(self) -> None:
        """Collect the picked column and direction and dismiss with result."""
        column_button = self.query_one("#sort-column", RadioSet).pressed_button
        direction_button = self.query_one("#sort-direction", RadioSet).pressed_button
        if column_button is None or column_button.id is None:
            self.dismiss(None)
            return
        direction = "asc" if direction_button is not None and direction_button.id == "dir-asc" else "desc"
        self.dismiss((column_button.id.removeprefix("col-"), direction))
