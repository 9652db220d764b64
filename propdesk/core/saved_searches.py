"""Saved-search storage for propdesk.

Saved searches live in one JSON file, one list per entity under the key
``<entity>_saved_searches``. The search bar itself holds no persistence
logic; the application wires a SavedSearchStore to the controller's
save/load/delete callbacks.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from propdesk.models.saved_search import SavedSearch

logger = logging.getLogger(__name__)

_SAVED_LIST = TypeAdapter(list[SavedSearch])


class SavedSearchError(Exception):
    """Raised for invalid saved-search operations (blank name, unknown id)."""


class SavedSearchStore:
    """Saved searches of one entity, backed by a JSON file.

    Example usage:
        store = SavedSearchStore(Path("~/.local/share/propdesk/saved.json"), "properties")
        saved = store.save("Big villas", "type=villa bedrooms>=5")
        store.delete(saved.id)

    Args:
        path: JSON file shared by all entities, or None to keep searches
            in memory only.
        entity: Entity the searches belong to.
    """

    def __init__(self, path: Optional[Path], entity: str):
        self.path = Path(path).expanduser() if path is not None else None
        self.entity = entity
        self._searches: list[SavedSearch] = self._read()

    @property
    def key(self) -> str:
        return f"{self.entity}_saved_searches"

    @property
    def searches(self) -> list[SavedSearch]:
        return list(self._searches)

    def find(self, name_or_id: str) -> SavedSearch | None:
        """Find a saved search by id, falling back to a case-insensitive name match."""
        for saved in self._searches:
            if saved.id == name_or_id:
                return saved
        lowered = name_or_id.lower()
        for saved in self._searches:
            if saved.name.lower() == lowered:
                return saved
        return None

    def save(self, name: str, query: str) -> SavedSearch:
        """Append a new saved search and persist.

        Raises:
            SavedSearchError: If the name is blank.
        """
        name = name.strip()
        if not name:
            raise SavedSearchError("Please enter a name for this search")
        saved = SavedSearch(
            id=uuid.uuid4().hex,
            name=name,
            query=query,
            timestamp=int(time.time() * 1000),
        )
        self._searches.append(saved)
        self._write()
        return saved

    def delete(self, search_id: str) -> SavedSearch:
        """Remove a saved search by id and persist.

        Raises:
            SavedSearchError: If no saved search has this id.
        """
        for i, saved in enumerate(self._searches):
            if saved.id == search_id:
                del self._searches[i]
                self._write()
                return saved
        raise SavedSearchError(f"No saved search with id '{search_id}'")

    def _read_all(self) -> dict:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load saved searches from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring saved searches in %s: not a JSON object", self.path)
            return {}
        return data

    def _read(self) -> list[SavedSearch]:
        entries = self._read_all().get(self.key, [])
        try:
            return _SAVED_LIST.validate_python(entries)
        except ValidationError as e:
            logger.warning("Ignoring malformed saved searches under %s: %s", self.key, e)
            return []

    def _write(self) -> None:
        if self.path is None:
            return
        data = self._read_all()
        data[self.key] = _SAVED_LIST.dump_python(self._searches, mode="json")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
