"""Tests for the plugin hook specification.

Tests verify that:
- PropdeskHookSpec defines the entity and backend hooks
- hookimpl decorator is available for plugins
- PropdeskPlugin base class provides sensible defaults
"""

from propdesk.models.descriptor import QueryDescriptor
from propdesk.plugin import PropdeskHookSpec, PropdeskPlugin, hookimpl


def test_hookspec_defines_required_hooks():
    """PropdeskHookSpec should define all required hooks."""
    spec = PropdeskHookSpec()
    assert hasattr(spec, "get_entities")
    assert hasattr(spec, "fetch_page")


def test_fetch_page_is_firstresult():
    """The first plugin that serves an entity answers the request."""
    opts = PropdeskHookSpec.fetch_page.propdesk_spec
    assert opts["firstresult"] is True


def test_base_plugin_has_defaults():
    """PropdeskPlugin should provide opt-out default implementations."""

    class TestPlugin(PropdeskPlugin):
        name = "test"

    plugin = TestPlugin()
    assert plugin.get_entities() == []
    assert plugin.fetch_page("properties", QueryDescriptor()) is None


def test_base_plugin_metadata_defaults():
    assert PropdeskPlugin.version == "0.0.0"
    assert PropdeskPlugin.description == ""


def test_hookimpl_marks_methods():
    """hookimpl should tag methods for pluggy."""

    class TestPlugin(PropdeskPlugin):
        name = "test"

        @hookimpl
        def get_entities(self):
            return [{"name": "leads", "label": "Leads", "columns": []}]

    assert hasattr(TestPlugin.get_entities, "propdesk_impl")
