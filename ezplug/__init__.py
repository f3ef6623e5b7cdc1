"""
ezplug - Enable optional plugins packaged as .ez archives.

This is the main package that exports the public API.
"""

__version__ = "0.1.0"

from ezplug.plugin.catalog import ScanResult, find_plugins
from ezplug.plugin.descriptor import ExtractionError, Plugin, get_plugin_info
from ezplug.plugin.manager import (
    EnableReport,
    MaterializationError,
    PluginError,
    PluginManager,
)
from ezplug.plugin.resolver import Resolution, resolve
from ezplug.plugin.store import EnabledPluginsStore, PersistenceError
from ezplug.plugin.versions import merge_plugin_lists

__all__ = [
    "__version__",
    "EnableReport",
    "EnabledPluginsStore",
    "ExtractionError",
    "MaterializationError",
    "PersistenceError",
    "Plugin",
    "PluginError",
    "PluginManager",
    "Resolution",
    "ScanResult",
    "find_plugins",
    "get_plugin_info",
    "merge_plugin_lists",
    "resolve",
]
