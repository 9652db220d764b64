"""Tests for the chip bar widget."""

from propdesk.tui.controller import Chip
from propdesk.tui.widgets.chip_bar import ChipBar, ChipButton


class TestChipButton:
    """Tests for individual chips."""

    def test_filter_chip(self):
        """Test a filter chip carries its chip and a remove mark."""
        chip = Chip(kind="filter", label="Price>5", index=0)
        button = ChipButton(chip)
        assert button.chip is chip
        assert str(button.label) == "Price>5 ✕"
        assert button.variant == "primary"

    def test_sort_chip_variant(self):
        button = ChipButton(Chip(kind="sort", label="Sort: Price (↑)"))
        assert button.variant == "warning"

    def test_clear_all_chip(self):
        """Test the clear-all chip has no chip attached."""
        button = ChipButton(None)
        assert button.chip is None
        assert str(button.label) == "Clear all ✕"
        assert button.variant == "error"


class TestChipBar:
    """Tests for the chip row."""

    def test_init_empty(self):
        bar = ChipBar()
        assert bar.chips == []
        assert bar._buttons() == []

    def test_buttons_end_with_clear_all(self):
        """Test every chip gets a button plus one clear-all button."""
        chips = [Chip(kind="text", label="villa"), Chip(kind="filter", label="Price>5", index=0)]
        bar = ChipBar(chips)
        buttons = bar._buttons()
        assert [b.chip for b in buttons] == chips + [None]

    def test_show_chips_before_mount(self):
        """Test chips can be replaced before the bar is mounted."""
        bar = ChipBar()
        chips = [Chip(kind="text", label="villa")]
        bar.show_chips(chips)
        assert bar.chips == chips

    def test_chip_removed_message(self):
        chip = Chip(kind="sort", label="Sort: Price (↓)")
        message = ChipBar.ChipRemoved(chip)
        assert message.chip is chip
