"""
Plugin Catalog Scanner.

This module discovers plugins by scanning a directory of .ez archives.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ezplug.plugin.descriptor import ExtractionError, Plugin, get_plugin_info

logger = logging.getLogger(__name__)

ARCHIVE_PATTERN = "*.ez"


@dataclass
class ScanResult:
    """
    Outcome of a catalog scan.

    Attributes:
        plugins: Successfully parsed plugins
        problems: Extraction failures, one per unreadable archive
    """

    plugins: list[Plugin] = field(default_factory=list)
    problems: list[ExtractionError] = field(default_factory=list)


def find_plugins(directory: Path, base_applications: Iterable[str] = ()) -> ScanResult:
    """
    Scan a directory for plugin archives.

    Individual failures never abort the scan; they are collected and
    reported as a single warning.

    Args:
        directory: Directory containing .ez archives
        base_applications: Names excluded from plugin dependency lists

    Returns:
        ScanResult with plugins and problems
    """
    result = ScanResult()
    base = frozenset(base_applications)

    try:
        archives = sorted(p for p in directory.glob(ARCHIVE_PATTERN) if p.is_file())
    except OSError as e:
        logger.warning("Cannot list plugin directory %s: %s", directory, e)
        return result

    if not archives and not directory.is_dir():
        logger.warning("Plugin directory %s does not exist", directory)
        return result

    for archive in archives:
        try:
            result.plugins.append(get_plugin_info(archive, base))
        except ExtractionError as e:
            result.problems.append(e)

    if result.problems:
        logger.warning(
            "Problem reading some plugins: %s",
            "; ".join(f"{Path(e.archive).name}: {e.reason}" for e in result.problems),
        )

    logger.debug("Found %d plugin(s) in %s", len(result.plugins), directory)
    return result
