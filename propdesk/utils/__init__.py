"""Utility helpers for propdesk."""

from propdesk.utils.git import find_git_root

__all__ = ["find_git_root"]
