"""
Plugin Dependency Resolver.

This module computes which plugins must be enabled to satisfy a request.

Key features:
- Dependency graph over all cataloged plugins
- Reachability closure from the requested plugins
- Dependency-first ordering of the closure for materialization
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ezplug.plugin.descriptor import Plugin

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """
    Result of resolving a set of requested plugin names.

    Attributes:
        reachable: Every plugin name that must be enabled
        missing: Requested names not present in the catalog
        order: The reachable names, dependencies before dependents
    """

    reachable: frozenset[str] = frozenset()
    missing: frozenset[str] = frozenset()
    order: list[str] = field(default_factory=list)


def build_graph(plugins: Iterable[Plugin]) -> dict[str, set[str]]:
    """
    Build the dependency graph of a catalog.

    Every plugin name becomes a node with an edge to itself and to each
    of its dependencies. Records sharing a name contribute the union of
    their dependencies.

    Args:
        plugins: Cataloged plugins

    Returns:
        Adjacency mapping name -> dependency names
    """
    graph: dict[str, set[str]] = {}
    for plugin in plugins:
        edges = graph.setdefault(plugin.name, {plugin.name})
        edges.update(plugin.dependencies)
    return graph


def reachable(graph: dict[str, set[str]], roots: Iterable[str]) -> set[str]:
    """
    Return the graph nodes reachable from the given roots.

    Roots and dependencies that are not nodes of the graph are dead ends.
    """
    seen: set[str] = set()
    stack = [root for root in roots if root in graph]
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        stack.extend(dep for dep in graph[node] if dep in graph and dep not in seen)
    return seen


def enable_order(graph: dict[str, set[str]], names: Iterable[str]) -> list[str]:
    """
    Order plugin names so that dependencies come before their dependents.

    Uses Kahn's algorithm restricted to the given names, breaking ties by
    name. Names caught in a dependency cycle are appended in name order.

    Args:
        graph: Dependency graph from build_graph()
        names: Names to order (typically a reachable set)

    Returns:
        Ordered list of names
    """
    subset = set(names)
    pending: dict[str, int] = {}
    dependents: dict[str, list[str]] = {name: [] for name in subset}

    for name in subset:
        deps = {d for d in graph.get(name, ()) if d in subset and d != name}
        pending[name] = len(deps)
        for dep in deps:
            dependents[dep].append(name)

    ready = sorted(name for name, count in pending.items() if count == 0)
    result = []

    while ready:
        node = ready.pop(0)
        result.append(node)
        for dependent in dependents[node]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                ready.append(dependent)
        ready.sort()

    if len(result) != len(subset):
        cyclic = sorted(subset.difference(result))
        logger.debug("Dependency cycle among %s; using name order", cyclic)
        result.extend(cyclic)

    return result


def resolve(plugins: Iterable[Plugin], requested: Iterable[str]) -> Resolution:
    """
    Resolve requested plugin names against a catalog.

    Missing names are reported, not raised; resolution proceeds with the
    requested names that exist.

    Args:
        plugins: Cataloged plugins
        requested: Plugin names to enable

    Returns:
        Resolution with reachable, missing and ordered names
    """
    graph = build_graph(plugins)
    requested = set(requested)
    missing = frozenset(requested.difference(graph))
    if missing:
        logger.debug("Requested plugins not in catalog: %s", sorted(missing))

    closure = reachable(graph, requested.intersection(graph))
    return Resolution(
        reachable=frozenset(closure),
        missing=missing,
        order=enable_order(graph, closure),
    )
