"""Main CLI module for propdesk.

This module re-exports the CLI for convenience. The main implementation
is in __main__.py.
"""

from propdesk.__main__ import cli

__all__ = ["cli"]
