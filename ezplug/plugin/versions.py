"""
Plugin Version Merging.

Versions are compared as plain strings, so "9" sorts after "10".
"""

from collections.abc import Iterable

from ezplug.plugin.descriptor import Plugin


def usort_plugins(plugins: Iterable[Plugin]) -> list[Plugin]:
    """Sort plugins by (name, version), dropping exact duplicates."""
    result: list[Plugin] = []
    for plugin in sorted(plugins, key=lambda p: (p.name, p.version)):
        if result and (result[-1].name, result[-1].version) == (
            plugin.name,
            plugin.version,
        ):
            continue
        result.append(plugin)
    return result


def merge_plugin_lists(
    first: Iterable[Plugin], second: Iterable[Plugin]
) -> list[Plugin]:
    """
    Merge two plugin lists, keeping only the highest version of each name.

    Args:
        first: Plugins (e.g. currently active)
        second: Plugins (e.g. newly enabled)

    Returns:
        Plugins sorted by name, one per distinct name
    """
    merged: list[Plugin] = []
    for plugin in usort_plugins([*first, *second]):
        # Sorted input puts the higher version last among equal names
        if merged and merged[-1].name == plugin.name:
            merged[-1] = plugin
        else:
            merged.append(plugin)
    return merged


def plugin_names(plugins: Iterable[Plugin]) -> list[str]:
    """Return the names of the given plugins."""
    return [plugin.name for plugin in plugins]


def lookup_plugins(names: Iterable[str], plugins: Iterable[Plugin]) -> list[Plugin]:
    """Find plugins by name, preserving the order of the plugin list."""
    wanted = set(names)
    return [plugin for plugin in plugins if plugin.name in wanted]
