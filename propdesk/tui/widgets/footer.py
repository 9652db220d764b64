"""One-line footer for the propdesk TUI.

Shows key hints on the left and, on the right, what the search bar
expects next. Built from Static widgets so it stays transparent.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import HorizontalGroup
from textual.widget import Widget
from textual.widgets import Static


class PropdeskFooter(Widget):
    """Footer displaying keybinding hints and a search hint.

    Args:
        bindings: List of (key, label) tuples to display.
        hint: Text shown after the bindings.
    """

    DEFAULT_CSS = """
    PropdeskFooter {
        dock: bottom;
        height: 1;
        background: transparent;
    }

    PropdeskFooter > HorizontalGroup {
        background: transparent;
        height: 1;
    }

    PropdeskFooter .footer-key {
        color: $primary;
        text-style: bold;
        width: auto;
    }

    PropdeskFooter .footer-label {
        color: $text;
        width: auto;
        padding: 0 1 0 0;
    }

    PropdeskFooter #footer-hint {
        color: $warning;
        width: 1fr;
        content-align: right middle;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        bindings: list[tuple[str, str]] | None = None,
        hint: str = "",
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._bindings = bindings or []
        self._hint = hint

    @property
    def hint(self) -> str:
        return self._hint

    def compose(self) -> ComposeResult:
        with HorizontalGroup():
            for key, label in self._bindings:
                yield Static(f" {key} ", classes="footer-key")
                yield Static(label, classes="footer-label")
            yield Static(self._hint, id="footer-hint")

    def set_hint(self, hint: str) -> None:
        """Replace the hint text."""
        self._hint = hint
        if self.is_mounted:
            self.query_one("#footer-hint", Static).update(hint)
