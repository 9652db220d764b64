"""Loads propdesk plugins and routes entity and page requests to them.

Plugins come from the ``propdesk.plugins`` entry point group or are
registered by hand (the built-in CRM catalogue, tests).
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points

import pluggy

from propdesk.core.backend import BackendError
from propdesk.models.descriptor import PageResult, QueryDescriptor
from propdesk.models.schema import EntityDefinition, entities_from_dicts
from propdesk.plugin import PropdeskHookSpec, PropdeskPlugin

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "propdesk.plugins"


class PluginError(Exception):
    """A plugin misbehaved or returned unusable data."""


class EntityNotFoundError(PluginError):
    """No registered plugin provides the requested entity."""


class PluginManager:
    """Registry of propdesk plugins on top of a pluggy manager.

    Merges the entity catalogues of every plugin and forwards page
    requests, so an instance can be passed wherever a Backend is expected.

    Example:
        manager = PluginManager()
        manager.register(CrmPlugin())
        manager.discover()
        page = manager.fetch_page("properties", descriptor)
    """

    def __init__(self) -> None:
        self.pm = pluggy.PluginManager("propdesk")
        self.pm.add_hookspecs(PropdeskHookSpec)
        self._plugins: dict[str, PropdeskPlugin] = {}

    def register(self, plugin: PropdeskPlugin) -> None:
        """Add ``plugin``, replacing any plugin already using its name."""
        self.unregister(plugin.name)
        self._plugins[plugin.name] = plugin
        self.pm.register(plugin, name=plugin.name)

    def unregister(self, name: str) -> None:
        """Remove the plugin called ``name``; unknown names are ignored."""
        plugin = self._plugins.pop(name, None)
        if plugin is not None:
            self.pm.unregister(plugin)

    def discover(self) -> list[str]:
        """Instantiate and register every installed entry point plugin.

        An entry point that fails to import or construct is logged and
        skipped so one broken package cannot take down the CLI.

        Returns:
            Names of the plugins registered by this call.
        """
        names: list[str] = []
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                plugin = ep.load()()
            except Exception as e:
                logger.warning("Skipping plugin entry point %r: %s", ep.name, e)
                continue
            self.register(plugin)
            names.append(plugin.name)
        return names

    def list_plugins(self) -> list[str]:
        return list(self._plugins)

    def get_plugin(self, name: str) -> PropdeskPlugin | None:
        return self._plugins.get(name)

    def get_plugin_info(self, name: str) -> dict[str, str] | None:
        """Name, version and description of a plugin, or None if unknown."""
        if name not in self._plugins:
            return None
        plugin = self._plugins[name]
        return {
            "name": plugin.name,
            "version": getattr(plugin, "version", "0.0.0"),
            "description": getattr(plugin, "description", ""),
        }

    def get_entities(self) -> dict[str, EntityDefinition]:
        """Collect entity schemas from all registered plugins.

        pluggy calls implementations in LIFO registration order, so the
        results are walked in reverse to let later plugins override earlier
        ones.

        Returns:
            Mapping of entity name to definition.

        Raises:
            PluginError: If a plugin returns a malformed entity definition.
        """
        entities: dict[str, EntityDefinition] = {}
        for result in reversed(self.pm.hook.get_entities()):
            try:
                definitions = entities_from_dicts(result or [])
            except ValueError as e:
                raise PluginError(f"Invalid entity definition: {e}") from e
            for definition in definitions:
                entities[definition.name] = definition
        return entities

    def get_entity(self, name: str) -> EntityDefinition:
        """Get one entity schema by name.

        Raises:
            EntityNotFoundError: If no plugin provides the entity.
        """
        entities = self.get_entities()
        if name not in entities:
            available = ", ".join(sorted(entities)) or "none"
            raise EntityNotFoundError(
                f"Unknown entity '{name}'. Available entities: {available}"
            )
        return entities[name]

    def fetch_page(self, entity: str, descriptor: QueryDescriptor) -> PageResult:
        """Ask the plugins for one page of ``entity``.

        Raises:
            BackendError: If no plugin serves the entity.
        """
        result = self.pm.hook.fetch_page(entity=entity, descriptor=descriptor)
        if result is None:
            raise BackendError(
                f"No backend available for '{entity}'. Use --records to load rows from a file."
            )
        return result
