"""Textual widgets for propdesk TUI.

This module provides the reusable widgets and modal screens of the
propdesk TUI.
"""

from propdesk.tui.widgets.chip_bar import ChipBar, ChipButton
from propdesk.tui.widgets.date_modal import DateModal
from propdesk.tui.widgets.footer import PropdeskFooter
from propdesk.tui.widgets.saved_modal import SavedSearchModal
from propdesk.tui.widgets.sort_modal import SortModal

__all__ = [
    "ChipBar",
    "ChipButton",
    "DateModal",
    "PropdeskFooter",
    "SavedSearchModal",
    "SortModal",
]
