"""Hook specifications for propdesk plugins.

This module defines the pluggy hook specification that plugins implement.
Plugins use the @hookimpl decorator to register their implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from propdesk.models.descriptor import PageResult, QueryDescriptor

hookspec = pluggy.HookspecMarker("propdesk")


class PropdeskHookSpec:
    """Hook specification defining the plugin interface.

    Plugins publish entity schemas and, optionally, a backend that can
    execute query descriptors. The application calls these hooks through
    the pluggy PluginManager.
    """

    @hookspec
    def get_entities(self) -> list[dict]:
        """Get the entities (CRM screens) provided by this plugin.

        Returns:
            List of entity definitions:
            [
                {
                    "name": "properties",          # Identifier (CLI, storage keys)
                    "label": "Properties",         # Display name
                    "columns": [
                        {"key": "pf_id", "label": "PF ID", "type": "text"},
                        {"key": "price", "label": "Price", "type": "number"},
                        ...
                    ],
                    "default_sort": {"column": "id", "direction": "asc"},
                },
                ...
            ]

        Column "type" is one of "text", "number" or "date". A column may
        set "searchable" to include or exclude it from free-text search;
        by default only text columns are searched.

        When two plugins publish the same entity name, the one registered
        last wins.
        """

    @hookspec(firstresult=True)
    def fetch_page(self, entity: str, descriptor: "QueryDescriptor") -> "PageResult | None":
        """Execute a query descriptor against a backend.

        Args:
            entity: Name of the entity to query.
            descriptor: Conditions, free-text match, order and page window.

        Returns:
            PageResult with the rows of the requested page and the total
            match count, or None if this plugin does not serve the entity.
            The first non-None result is used.
        """
