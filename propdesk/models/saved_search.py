"""SavedSearch data model for propdesk.

A saved search is a named snapshot of raw query text. It is re-parsed on
load, so it has no link to a ParsedQuery.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SavedSearch(BaseModel):
    """A named raw query.

    Attributes:
        id: Opaque identifier.
        name: Name given by the user.
        query: Raw search bar text.
        timestamp: Creation time in epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    query: str
    timestamp: int
