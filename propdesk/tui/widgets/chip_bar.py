"""Chip bar for the propdesk search panel.

Shows one removable chip per free-text search, filter and sort of the
current query, plus a clear-all chip.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import HorizontalGroup
from textual.message import Message
from textual.widgets import Button

from propdesk.tui.controller import Chip

# Button variant per chip kind
_CHIP_VARIANTS = {
    "text": "default",
    "filter": "primary",
    "sort": "warning",
}


class ChipButton(Button):
    """A chip; pressing it removes the part of the query it shows."""

    def __init__(self, chip: Chip | None, *args, **kwargs):
        if chip is None:
            label = "Clear all ✕"
            variant = "error"
        else:
            label = f"{chip.label} ✕"
            variant = _CHIP_VARIANTS.get(chip.kind, "default")
        super().__init__(label, *args, variant=variant, **kwargs)
        self.chip = chip


class ChipBar(HorizontalGroup):
    """Row of chips for the current query.

    Posts ChipRemoved when a chip is pressed; the chip is None for the
    clear-all chip.
    """

    DEFAULT_CSS = """
    ChipBar {
        height: auto;
        padding: 0 1;
    }

    ChipBar ChipButton {
        height: 1;
        min-width: 0;
        border: none;
        margin: 0 1 0 0;
    }
    """

    class ChipRemoved(Message):
        """Posted when a chip is pressed."""

        def __init__(self, chip: Chip | None) -> None:
            super().__init__()
            self.chip = chip

    def __init__(self, chips: list[Chip] | None = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._chips = list(chips or [])

    @property
    def chips(self) -> list[Chip]:
        return list(self._chips)

    def compose(self) -> ComposeResult:
        yield from self._buttons()

    def _buttons(self) -> list[ChipButton]:
        if not self._chips:
            return []
        return [ChipButton(chip) for chip in self._chips] + [ChipButton(None)]

    def show_chips(self, chips: list[Chip]) -> None:
        """Replace the displayed chips."""
        if chips == self._chips:
            return
        self._chips = list(chips)
        if not self.is_mounted:
            return
        self.remove_children()
        self.mount_all(self._buttons())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if isinstance(event.button, ChipButton):
            self.post_message(self.ChipRemoved(event.button.chip))
