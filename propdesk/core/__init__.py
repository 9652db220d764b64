"""Core logic for propdesk.

This module provides the core functionality:
- FilterTranslator: ParsedQuery to QueryDescriptor translation
- RequestSequencer: Stale-response detection for backend requests
- MemoryBackend: In-memory execution of query descriptors
- SavedSearchStore: Saved-search persistence
- PluginManager: Plugin discovery and registration
- ConfigLoader: Configuration file loading
"""

from propdesk.core.backend import Backend, BackendError, MemoryBackend
from propdesk.core.config import (
    Config,
    ConfigError,
    ConfigLoader,
    GeneralConfig,
    PaginationConfig,
    SearchConfig,
    StorageConfig,
)
from propdesk.core.plugin import EntityNotFoundError, PluginError, PluginManager
from propdesk.core.saved_searches import SavedSearchError, SavedSearchStore
from propdesk.core.translator import FilterTranslator, RequestSequencer

__all__ = [
    "Backend",
    "BackendError",
    "Config",
    "ConfigError",
    "ConfigLoader",
    "EntityNotFoundError",
    "FilterTranslator",
    "GeneralConfig",
    "MemoryBackend",
    "PaginationConfig",
    "PluginError",
    "PluginManager",
    "RequestSequencer",
    "SavedSearchError",
    "SavedSearchStore",
    "SearchConfig",
    "StorageConfig",
]
