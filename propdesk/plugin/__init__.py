"""Plugin system for propdesk.

This module provides the plugin infrastructure using pluggy.
Plugins implement hooks defined in hookspec.py to publish entity schemas
and, optionally, a backend for them.

Usage:
    from propdesk.plugin import PropdeskPlugin, hookimpl

    class MyPlugin(PropdeskPlugin):
        name = "my-plugin"

        @hookimpl
        def get_entities(self):
            return [{"name": "leads", "label": "Leads", "columns": [...]}]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

from propdesk.plugin.hookspec import PropdeskHookSpec

if TYPE_CHECKING:
    from propdesk.models.descriptor import PageResult, QueryDescriptor

# Create the hookimpl marker for plugins to use
hookimpl = pluggy.HookimplMarker("propdesk")

__all__ = ["PropdeskPlugin", "hookimpl", "PropdeskHookSpec"]


class PropdeskPlugin:
    """Base class for propdesk plugins.

    Plugins should inherit from this class and override the hooks they implement.

    Subclasses must define:
        name: Unique identifier for the plugin (str)

    Optional hooks (have defaults):
        get_entities(): Entity schemas (default: empty list)
        fetch_page(): Backend for the plugin's entities (default: None)

    Optional attributes:
        version: Plugin version string (str)
        description: Human-readable description (str)
    """

    name: str = "base"
    version: str = "0.0.0"
    description: str = ""

    @hookimpl
    def get_entities(self) -> list[dict]:
        """Default implementation: no entities."""
        return []

    @hookimpl
    def fetch_page(self, entity: str, descriptor: "QueryDescriptor") -> "PageResult | None":
        """Default implementation: does not serve any entity.

        Returning None lets pluggy move on to the next plugin.
        """
        return None
