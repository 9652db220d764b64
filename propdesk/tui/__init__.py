"""Textual UI components for propdesk.

This module provides the TUI (Terminal User Interface) for interactive
CRM search using the Textual framework.
"""

from propdesk.tui.app import PropdeskApp, run_tui

__all__ = ["PropdeskApp", "run_tui"]
