"""Project root detection for propdesk.

Team-wide settings live in a ``propdesk.toml`` at the root of the git
checkout that holds a project's data exports; this module finds that root.
"""

import os
from pathlib import Path
from typing import Optional

GIT_ROOT_ENV = "PROPDESK_GIT_ROOT"


def find_git_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the closest directory at or above ``start_path`` holding a ``.git`` entry.

    ``PROPDESK_GIT_ROOT``, when set, is returned as-is without checking
    that it exists.

    Args:
        start_path: Directory to start from; the current working directory if None.

    Returns:
        The repository root, or None outside a repository.
    """
    override = os.environ.get(GIT_ROOT_ENV)
    if override:
        return Path(override)

    current = Path.cwd() if start_path is None else Path(start_path).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None
