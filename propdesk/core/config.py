"""propdesk settings from ``propdesk.toml`` files.

Settings are layered: built-in defaults, then the user file
(``~/.config/propdesk/config.toml``), then ``propdesk.toml`` at the git
root, then ``propdesk.toml`` in the working directory. Command line flags
are applied on top by the CLI.

Example ``propdesk.toml``::

    [general]
    default_entity = "transactions"

    [search]
    debounce_seconds = 0.5
    suggestion_limit = 8

    [pagination]
    page_size = 25

    [storage]
    saved_searches = "~/crm/saved_searches.json"
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import tomli

from propdesk.utils.git import find_git_root

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "propdesk.toml"
DEFAULT_SAVED_SEARCHES_PATH = Path("~/.local/share/propdesk/saved_searches.json")

_LINE_RE = re.compile(r"line (\d+)", re.IGNORECASE)


class ConfigError(Exception):
    """A config file could not be read or holds an invalid value.

    Attributes:
        line: 1-based line of the problem, when tomli reports one.
        path: File the problem was found in, when known.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        path: Optional[Path] = None,
    ):
        self.line = line
        self.path = path
        location = " ".join(
            part for part in (
                f"Error in {path}" if path else "",
                f"at line {line}" if line is not None else "",
            ) if part
        )
        super().__init__(f"{location}: {message}" if location else message)


@dataclass
class GeneralConfig:
    """Which entity the CLI and TUI open when none is given."""

    default_entity: str = "properties"

    @classmethod
    def from_dict(cls, data: dict) -> "GeneralConfig":
        return cls(default_entity=str(data.get("default_entity", cls.default_entity)))


@dataclass
class SearchConfig:
    """Search bar behaviour."""

    debounce_seconds: float = 1.0
    suggestion_limit: int = 10

    @classmethod
    def from_dict(cls, data: dict) -> "SearchConfig":
        """Build from the ``[search]`` table.

        Raises:
            ConfigError: If the debounce is negative or the limit is below 1.
        """
        debounce = float(data.get("debounce_seconds", cls.debounce_seconds))
        limit = int(data.get("suggestion_limit", cls.suggestion_limit))
        if debounce < 0:
            raise ConfigError(f"search.debounce_seconds must be >= 0, got {debounce}")
        if limit < 1:
            raise ConfigError(f"search.suggestion_limit must be >= 1, got {limit}")
        return cls(debounce_seconds=debounce, suggestion_limit=limit)


@dataclass
class PaginationConfig:
    """Rows per result page."""

    page_size: int = 10

    @classmethod
    def from_dict(cls, data: dict) -> "PaginationConfig":
        page_size = int(data.get("page_size", cls.page_size))
        if page_size < 1:
            raise ConfigError(f"pagination.page_size must be >= 1, got {page_size}")
        return cls(page_size=page_size)


@dataclass
class StorageConfig:
    """Where saved searches are kept."""

    saved_searches: Path = DEFAULT_SAVED_SEARCHES_PATH

    @classmethod
    def from_dict(cls, data: dict) -> "StorageConfig":
        return cls(saved_searches=Path(data.get("saved_searches", DEFAULT_SAVED_SEARCHES_PATH)))


_SECTIONS = {
    "general": GeneralConfig,
    "search": SearchConfig,
    "pagination": PaginationConfig,
    "storage": StorageConfig,
}


@dataclass
class Config:
    """All propdesk settings, one attribute per TOML table."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build from parsed TOML; missing tables and keys keep their defaults.

        Unknown tables and keys are logged and ignored.

        Raises:
            ConfigError: If a value is out of range.
        """
        for name, value in data.items():
            section = _SECTIONS.get(name)
            if section is None or not isinstance(value, dict):
                logger.warning("Ignoring unknown config section [%s]", name)
                continue
            known = {f.name for f in fields(section)}
            for key in value.keys() - known:
                logger.warning("Ignoring unknown config key %s.%s", name, key)

        return cls(**{
            name: section.from_dict(data[name] if isinstance(data.get(name), dict) else {})
            for name, section in _SECTIONS.items()
        })


class ConfigLoader:
    """Reads, discovers and merges ``propdesk.toml`` files.

    Example usage:
        config = ConfigLoader().load_merged()
        config = ConfigLoader().load(Path("ci/propdesk.toml"))
    """

    def load(self, path: Optional[Path]) -> Config:
        """Load a single file, or the defaults when ``path`` is None.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            ConfigError: If the file is not valid TOML or holds a bad value.
        """
        if path is None:
            return Config()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return self._build(self._read_toml(path), path)

    def discover_configs(self, start_path: Optional[Path] = None) -> list[Path]:
        """List existing config files, lowest precedence first.

        Candidates are the user file, ``propdesk.toml`` at the git root
        and ``propdesk.toml`` in ``start_path`` (the working directory if
        None). A file reachable under two roles is listed once.
        """
        start = Path.cwd() if start_path is None else Path(start_path).resolve()
        candidates = [Path(os.path.expanduser("~")) / ".config" / "propdesk" / "config.toml"]
        git_root = find_git_root(start)
        if git_root is not None:
            candidates.append(git_root / CONFIG_FILENAME)
        candidates.append(start / CONFIG_FILENAME)

        found: dict[Path, Path] = {}
        for candidate in candidates:
            if candidate.exists():
                found.setdefault(candidate.resolve(), candidate)
        return list(found.values())

    def load_merged(self, start_path: Optional[Path] = None) -> Config:
        """Merge every discovered file over the defaults.

        Tables are merged key by key, so a later file only overrides what
        it sets.

        Raises:
            ConfigError: If any file is not valid TOML or holds a bad value.
        """
        merged: dict = {}
        last: Optional[Path] = None
        for path in self.discover_configs(start_path):
            logger.debug("Reading config %s", path)
            merged = self._deep_merge(merged, self._read_toml(path))
            last = path
        return self._build(merged, last)

    def _build(self, data: dict, path: Optional[Path]) -> Config:
        try:
            return Config.from_dict(data)
        except ConfigError as e:
            raise ConfigError(str(e), path=path) from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value: {e}", path=path) from e

    def _read_toml(self, path: Path) -> dict:
        try:
            return tomli.loads(path.read_text(encoding="utf-8"))
        except tomli.TOMLDecodeError as e:
            match = _LINE_RE.search(str(e))
            raise ConfigError(
                str(e), line=int(match.group(1)) if match else None, path=path,
            ) from e

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Return ``base`` updated with ``override``; nested tables merge, anything else is replaced."""
        merged: dict[str, Any] = dict(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(current, value)
            else:
                merged[key] = value
        return merged
