"""Built-in CRM entity catalogue for propdesk.

This plugin publishes the column schemas of the CRM screens: listed
properties, off-plan projects, contacts, areas and the historical
transaction database. It does not serve rows; a backend comes from
another plugin or from a records file.
"""

from __future__ import annotations

from propdesk.plugin import PropdeskPlugin, hookimpl

_PROPERTIES = {
    "name": "properties",
    "label": "Properties",
    "columns": [
        # Free text only looks up listing ids
        {"key": "pf_id", "label": "PF ID", "type": "text"},
        {"key": "type", "label": "Type", "type": "text", "searchable": False},
        {"key": "bedrooms", "label": "Bedrooms", "type": "number"},
        {"key": "price", "label": "Price", "type": "number"},
        {"key": "square_meter", "label": "Square Meter", "type": "number"},
    ],
    "default_sort": {"column": "id", "direction": "asc"},
}

_PROJECTS = {
    "name": "projects",
    "label": "Projects",
    "columns": [
        {"key": "title", "label": "Title", "type": "text"},
        {"key": "slug", "label": "Slug", "type": "text"},
        {"key": "price", "label": "Price", "type": "number"},
    ],
    "default_sort": {"column": "id", "direction": "asc"},
}

_CONTACTS = {
    "name": "contacts",
    "label": "Contacts",
    "columns": [
        {"key": "full_name", "label": "Full Name", "type": "text"},
        {"key": "email", "label": "Email", "type": "text"},
        {"key": "phone", "label": "Phone", "type": "text"},
    ],
    "default_sort": {"column": "id", "direction": "asc"},
}

_AREAS = {
    "name": "areas",
    "label": "Areas",
    "columns": [
        {"key": "title", "label": "Title", "type": "text"},
        {"key": "city", "label": "City", "type": "text"},
    ],
    "default_sort": {"column": "id", "direction": "asc"},
}

_TRANSACTIONS = {
    "name": "transactions",
    "label": "Transactions",
    "columns": [
        {"key": "date", "label": "Date", "type": "date"},
        {"key": "price", "label": "Price", "type": "number"},
        {"key": "area_and_community", "label": "Area", "type": "text"},
        {"key": "project_name", "label": "Project", "type": "text"},
        {"key": "building", "label": "Building", "type": "text"},
        {"key": "unit_number", "label": "Unit Number", "type": "text"},
        {"key": "property_type", "label": "Property Type", "type": "text"},
        {"key": "bedroom", "label": "Bedrooms", "type": "text", "searchable": False},
        {"key": "owner_name", "label": "Owner Name", "type": "text"},
        {"key": "mobile1", "label": "Mobile", "type": "text"},
        {"key": "deal_type", "label": "Deal Type", "type": "text"},
        {"key": "size", "label": "Size", "type": "number"},
    ],
    "default_sort": {"column": "date", "direction": "desc"},
}


class CrmPlugin(PropdeskPlugin):
    """Entity schemas of the real-estate CRM screens.

    Attributes:
        name: Plugin identifier ("crm")
        version: Plugin version
        description: Human-readable description
    """

    name = "crm"
    version = "0.1.0"
    description = "Column schemas for the real-estate CRM screens"

    @hookimpl
    def get_entities(self) -> list[dict]:
        return [_PROPERTIES, _PROJECTS, _CONTACTS, _AREAS, _TRANSACTIONS]
