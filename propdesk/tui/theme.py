"""Nord transparent theme for the propdesk TUI.

Registers a Nord palette so the search bar, chips and results table
share the terminal background.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textual.app import App

THEME_NAME = "propdesk-nord"

# Nord colours by role
NORD_PALETTE = {
    "primary": "#88C0D0",
    "secondary": "#81A1C1",
    "accent": "#B48EAD",
    "foreground": "#D8DEE9",
    "success": "#A3BE8C",
    "warning": "#EBCB8B",
    "error": "#BF616A",
    "surface": "#3B4252",
    "panel": "#434C5E",
}


def register_nord_theme(app: App, transparent: bool = True) -> None:
    """Register and activate the Nord theme.

    Args:
        app: The Textual application to register the theme on.
        transparent: If True, enable ANSI transparency so the
            terminal background shows through.
    """
    from textual.theme import Theme

    app.register_theme(Theme(name=THEME_NAME, dark=True, **NORD_PALETTE))
    app.theme = THEME_NAME
    if transparent:
        app.ansi_color = True
