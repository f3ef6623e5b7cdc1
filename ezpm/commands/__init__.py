"""ezpm commands."""

from pathlib import Path
from typing import Any

from ezplug.config import load_settings
from ezplug.plugin.manager import PluginManager
from ezplug.plugin.store import EnabledPluginsStore


def build_manager(args: Any) -> PluginManager:
    """Create a PluginManager from parsed command-line arguments."""
    settings = load_settings(
        Path(args.config) if args.config else None,
        plugins_dir=args.plugins_dir,
        plugins_dist_dir=args.plugins_dist_dir,
    )
    return PluginManager(
        plugins_dir=settings.plugins_dir,
        plugins_dist_dir=settings.plugins_dist_dir,
        store=EnabledPluginsStore(settings.enabled_plugins_file),
        base_applications=settings.base_applications,
    )
