"""
Enabled Plugins Store.

This module persists the list of enabled plugin names.

The file is TOML with a single key:

    # Plugins enabled by ezpm
    plugins = ["alpha", "beta"]

Names are written sorted and without duplicates.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import tomlkit

from ezplug.config.toml_handler import TOMLError, read_toml, write_toml

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the enabled plugins file cannot be read or written."""

    pass


class EnabledPluginsStore:
    """
    File-backed set of enabled plugin names.

    Example:
        store = EnabledPluginsStore(Path("enabled_plugins.toml"))
        names = store.read()
        store.write([*names, "new-plugin"])
    """

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> list[str]:
        """
        Read the enabled plugin names.

        Returns:
            Sorted plugin names; empty if the file does not exist

        Raises:
            PersistenceError: If the file cannot be parsed
        """
        if not self.path.exists():
            return []

        try:
            data = read_toml(self.path)
        except TOMLError as e:
            raise PersistenceError(f"Failed to read enabled plugins: {e}") from e

        names = data.get("plugins", [])
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise PersistenceError(
                f"'plugins' in {self.path} must be a list of strings"
            )
        return sorted(set(names))

    def write(self, names: Iterable[str]) -> None:
        """
        Replace the enabled plugin names.

        Args:
            names: Plugin names to persist

        Raises:
            PersistenceError: If the file cannot be written
        """
        doc = tomlkit.document()
        doc.add(tomlkit.comment("Plugins enabled by ezpm"))
        doc.add("plugins", sorted(set(names)))

        try:
            write_toml(self.path, doc)
        except TOMLError as e:
            raise PersistenceError(f"Failed to write enabled plugins: {e}") from e

        logger.info("Wrote enabled plugins to %s", self.path)

    def __repr__(self) -> str:
        return f"EnabledPluginsStore({self.path})"
