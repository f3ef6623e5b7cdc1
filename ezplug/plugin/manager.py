"""
Plugin Manager.

This module enables plugins by copying their archives from the
distribution directory into the active plugins directory.

Key features:
- Catalog scan of available and enabled plugins
- Dependency closure of the requested plugins
- Copy plan validated before any archive is copied
- Version-aware merge into the persisted enabled set
"""

import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ezplug.plugin.catalog import find_plugins
from ezplug.plugin.descriptor import Plugin
from ezplug.plugin.resolver import resolve
from ezplug.plugin.store import EnabledPluginsStore
from ezplug.plugin.versions import (
    lookup_plugins,
    merge_plugin_lists,
    plugin_names,
    usort_plugins,
)

logger = logging.getLogger(__name__)


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class MaterializationError(PluginError):
    """Raised when a plugin archive cannot be copied into the plugins directory."""

    def __init__(self, plugin: Plugin, reason: str):
        super().__init__(f"Error enabling {plugin.name} ({reason})")
        self.plugin = plugin
        self.reason = reason


@dataclass
class EnablePlan:
    """
    What an enable operation will do, computed before any copy.

    Attributes:
        requested: Names the caller asked for
        missing: Requested names not found in the distribution directory
        plugins: Plugins to copy, dependencies first
        previous: Enabled plugin names read from the store
        active: Enabled plugin names after the operation, sorted
    """

    requested: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    plugins: list[Plugin] = field(default_factory=list)
    previous: list[str] = field(default_factory=list)
    active: list[str] = field(default_factory=list)


@dataclass
class EnableReport:
    """
    Outcome of an enable operation.

    Attributes:
        requested: Names the caller asked for
        missing: Requested names not found in the distribution directory
        enabled: Plugins copied into the plugins directory, in copy order
        active: Final enabled plugin names, sorted
        changed: Whether the persisted enabled set was updated
    """

    requested: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    enabled: list[Plugin] = field(default_factory=list)
    active: list[str] = field(default_factory=list)
    changed: bool = False


class PluginManager:
    """
    Plugin enabling workflow.

    Every call rescans the directories; no plugin record outlives a call.
    """

    def __init__(
        self,
        plugins_dir: Path,
        plugins_dist_dir: Path,
        store: EnabledPluginsStore,
        base_applications: Iterable[str] = (),
    ):
        """
        Initialize PluginManager.

        Args:
            plugins_dir: Directory enabled archives are copied into
            plugins_dist_dir: Directory holding all available archives
            store: Persisted set of enabled plugin names
            base_applications: Names never treated as plugin dependencies
        """
        self.plugins_dir = plugins_dir
        self.plugins_dist_dir = plugins_dist_dir
        self.store = store
        self.base_applications = frozenset(base_applications)

    def available_plugins(self) -> list[Plugin]:
        """Scan the distribution directory."""
        return find_plugins(self.plugins_dist_dir, self.base_applications).plugins

    def installed_plugins(self) -> list[Plugin]:
        """Scan the plugins directory."""
        return find_plugins(self.plugins_dir, self.base_applications).plugins

    def list_plugins(self) -> list[tuple[Plugin, bool]]:
        """
        List every known plugin with its enabled flag.

        Returns:
            (plugin, enabled) pairs sorted by name and version
        """
        installed = self.installed_plugins()
        enabled_names = set(plugin_names(installed))
        return [
            (plugin, plugin.name in enabled_names)
            for plugin in usort_plugins([*installed, *self.available_plugins()])
        ]

    def plan(self, names: Iterable[str]) -> EnablePlan:
        """
        Work out what enabling the given plugins involves, without copying.

        The enabled set is read here, so an unreadable store fails before
        any archive is copied.

        Args:
            names: Plugin names to enable

        Returns:
            EnablePlan for commit()

        Raises:
            PersistenceError: If the enabled set cannot be read
        """
        requested = list(dict.fromkeys(names))
        all_plugins = self.available_plugins()
        resolution = resolve(all_plugins, requested)
        missing = sorted(resolution.missing)
        if missing:
            logger.debug("Plugins not found: %s", ", ".join(missing))

        # Highest version per name, in dependency-first order
        newest = {p.name: p for p in merge_plugin_lists(all_plugins, [])}
        to_enable = [newest[name] for name in resolution.order]

        previous = self.store.read()
        found = lookup_plugins(previous, all_plugins)
        unknown = set(previous).difference(plugin_names(found))
        active = sorted(
            set(plugin_names(merge_plugin_lists(found, to_enable))) | unknown
        )

        logger.info("Marked for enabling: %s", ", ".join(resolution.order))
        return EnablePlan(
            requested=requested,
            missing=missing,
            plugins=to_enable,
            previous=previous,
            active=active,
        )

    def commit(self, plan: EnablePlan) -> EnableReport:
        """
        Copy the planned archives and persist the new enabled set.

        Args:
            plan: Result of plan()

        Returns:
            EnableReport describing what was done

        Raises:
            MaterializationError: If any archive copy fails (remaining copies
                are abandoned, already-copied archives stay in place)
            PersistenceError: If the enabled set cannot be written
        """
        self._materialize(plan.plugins)
        report = EnableReport(
            requested=plan.requested,
            missing=plan.missing,
            enabled=plan.plugins,
            active=plan.active,
        )

        if plan.active != plan.previous:
            self.store.write(plan.active)
            report.changed = True
            logger.info("Enabled plugins are now: %s", ", ".join(plan.active))

        return report

    def enable(self, names: Iterable[str]) -> EnableReport:
        """
        Enable plugins and everything they depend on.

        Args:
            names: Plugin names to enable

        Returns:
            EnableReport describing what was done

        Raises:
            MaterializationError: If any archive copy fails
            PersistenceError: If the enabled set cannot be read or written
        """
        return self.commit(self.plan(names))

    def _copy_plan(self, plugins: list[Plugin]) -> list[tuple[Plugin, Path]]:
        """
        Work out every copy up front and check the destination is writable.

        Raises:
            MaterializationError: If the plugins directory is unusable
        """
        plan = [(p, self.plugins_dir / p.location.name) for p in plugins]
        if not plan:
            return plan

        try:
            self.plugins_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MaterializationError(plan[0][0], str(e)) from e

        if not os.access(self.plugins_dir, os.W_OK):
            raise MaterializationError(
                plan[0][0], f"{self.plugins_dir} is not writable"
            )

        for plugin, _ in plan:
            if not plugin.location.is_file():
                raise MaterializationError(
                    plugin, f"archive {plugin.location} is missing"
                )
        return plan

    def _materialize(self, plugins: list[Plugin]) -> None:
        """Copy each plugin's archive into the plugins directory."""
        for plugin, target in self._copy_plan(plugins):
            logger.info("Enabling %s-%s", plugin.name, plugin.version)
            try:
                shutil.copyfile(plugin.location, target)
            except OSError as e:
                raise MaterializationError(plugin, str(e)) from e
