"""propdesk - query language, search bar and result paging for a real-estate CRM."""

__version__ = "0.1.0"
