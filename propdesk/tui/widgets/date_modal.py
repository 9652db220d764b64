"""Date picker modal for propdesk TUI.

Picks a calendar day for a date filter. The day can be typed as
yyyy-MM-dd or stepped with the buttons.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from propdesk.models.schema import SearchColumn
from propdesk.tui.suggestions import DATE_FORMAT


def parse_day(text: str) -> date | None:
    """Parse a yyyy-MM-dd string, returning None if it is not a real day."""
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


class DateModal(ModalScreen[date | None]):
    """Modal screen for picking the value of a date filter.

    On Pick/Enter: dismisses with the chosen date.
    On Cancel/Escape: dismisses with None.
    """

    DEFAULT_CSS = """
    DateModal {
        align: center middle;
    }

    #date-modal-container {
        width: 44;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #date-modal-title {
        text-style: bold;
        width: 100%;
        content-align: center middle;
        margin-bottom: 1;
    }

    #date-error {
        color: $error;
        height: 1;
    }

    .date-row {
        height: 3;
        align: center middle;
    }

    .date-row Button {
        margin: 0 1;
        min-width: 8;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(
        self,
        column: SearchColumn,
        initial: date | None = None,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._column = column
        self._day = initial or date.today()

    @property
    def day(self) -> date:
        return self._day

    def compose(self) -> ComposeResult:
        with Vertical(id="date-modal-container"):
            yield Static(f"Pick {self._column.label}", id="date-modal-title")
            yield Label("Date (yyyy-mm-dd)")
            yield Input(value=self._day.strftime(DATE_FORMAT), id="date-input")
            yield Static("", id="date-error")
            with Horizontal(classes="date-row"):
                yield Button("-1", id="btn-prev")
                yield Button("Today", id="btn-today")
                yield Button("+1", id="btn-next")
            with Horizontal(classes="date-row"):
                yield Button("Pick", variant="primary", id="btn-pick")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_mount(self) -> None:
        self.query_one("#date-input", Input).focus()

    def step(self, days: int) -> date:
        """Move the selected day by ``days`` and return it."""
        self._day = self._day + timedelta(days=days)
        self._show_day()
        return self._day

    def _show_day(self) -> None:
        if self.is_mounted:
            self.query_one("#date-input", Input).value = self._day.strftime(DATE_FORMAT)
            self.query_one("#date-error", Static).update("")

    def on_input_changed(self, event: Input.Changed) -> None:
        day = parse_day(event.value)
        if day is not None:
            self._day = day
            self.query_one("#date-error", Static).update("")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._pick(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Route the dialog buttons."""
        button_id = event.button.id
        if button_id == "btn-prev":
            self.step(-1)
        elif button_id == "btn-next":
            self.step(1)
        elif button_id == "btn-today":
            self._day = date.today()
            self._show_day()
        elif button_id == "btn-pick":
            self._pick(self.query_one("#date-input", Input).value)
        elif button_id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        """Close without a result."""
        self.dismiss(None)

    def _pick(self, text: str) -> None:
        day = parse_day(text)
        if day is None:
            self.query_one("#date-error", Static).update("Not a valid date")
            return
        self.dismiss(day)
