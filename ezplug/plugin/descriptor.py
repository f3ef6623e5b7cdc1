"""
Plugin Descriptor Extraction.

This module reads plugin metadata out of .ez archives.

Key features:
- Locating the ebin/*.app descriptor inside an archive
- Parsing the descriptor term into an immutable Plugin record
- Filtering base applications out of the dependency list
- Structured errors for every failure path
"""

import io
import re
import zipfile
import zlib
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ezplug.plugin.term import Atom, TermSyntaxError, parse_term

APP_FILE_RE = re.compile(r"^.*/ebin/.*\.app$")


class ExtractionError(Exception):
    """
    Raised when plugin metadata cannot be read from an archive.

    Attributes:
        archive: Path (or identifier) of the offending archive
        reason: Short description of what went wrong
    """

    def __init__(self, archive: Path | str, reason: str):
        super().__init__(f"{archive}: {reason}")
        self.archive = archive
        self.reason = reason


class InvalidArchiveError(ExtractionError):
    """Raised when the archive cannot be opened or listed."""

    pass


class NoDescriptorError(ExtractionError):
    """Raised when the archive contains no ebin/*.app descriptor."""

    pass


class InvalidDescriptorError(ExtractionError):
    """Raised when the descriptor text or its structure is malformed."""

    pass


@dataclass(frozen=True)
class Plugin:
    """
    A plugin discovered in an archive.

    Attributes:
        name: Plugin (application) name, unique within a catalog
        version: Version string, compared lexicographically
        description: Human-readable description
        dependencies: Names of optional plugins this plugin requires
        location: Path of the backing archive
    """

    name: str
    version: str
    description: str
    dependencies: frozenset[str] = field(default_factory=frozenset)
    location: Path = field(default_factory=Path)


def find_app_files(names: Iterable[str]) -> list[str]:
    """Return the archive entries that look like ebin/*.app descriptors."""
    return [name for name in names if APP_FILE_RE.match(name)]


def read_app_file(data: bytes, archive: Path | str) -> Any:
    """
    Read and parse the descriptor term from archive bytes.

    The first matching descriptor in listing order wins.

    Args:
        data: Raw archive bytes
        archive: Archive identifier used in error reports

    Returns:
        Parsed descriptor term

    Raises:
        InvalidArchiveError: If the bytes are not a readable archive
        NoDescriptorError: If no descriptor entry exists
        InvalidDescriptorError: If the descriptor cannot be decoded or parsed
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            app_files = find_app_files(zf.namelist())
            if not app_files:
                raise NoDescriptorError(archive, "no ebin/*.app file found")
            raw = zf.read(app_files[0])
    except ExtractionError:
        raise
    except (
        zipfile.BadZipFile,
        zlib.error,
        EOFError,
        OSError,
        ValueError,
        NotImplementedError,
        RuntimeError,
    ) as e:
        raise InvalidArchiveError(archive, f"invalid archive: {e}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidDescriptorError(archive, f"descriptor is not UTF-8: {e}") from e

    try:
        return parse_term(text)
    except TermSyntaxError as e:
        raise InvalidDescriptorError(archive, f"invalid descriptor: {e}") from e


def filter_applications(
    applications: Iterable[str], base_applications: Iterable[str]
) -> frozenset[str]:
    """
    Keep only the applications that are optional plugins.

    Args:
        applications: Application names referenced by a descriptor
        base_applications: Names that are always present at runtime

    Returns:
        Names not found among the base applications
    """
    base = frozenset(base_applications)
    return frozenset(app for app in applications if app not in base)


def plugin_from_term(
    term: Any, archive: Path, base_applications: Iterable[str] = ()
) -> Plugin:
    """
    Build a Plugin from a parsed {application, Name, Props} term.

    Args:
        term: Parsed descriptor term
        archive: Archive path stored as the plugin location
        base_applications: Names excluded from the dependency list

    Returns:
        Plugin record

    Raises:
        InvalidDescriptorError: If the term does not have the expected shape
    """
    if not (
        isinstance(term, tuple)
        and len(term) == 3
        and term[0] == Atom("application")
        and isinstance(term[0], Atom)
    ):
        raise InvalidDescriptorError(archive, "expected {application, Name, Props}")

    _, name, props = term
    if not isinstance(name, Atom):
        raise InvalidDescriptorError(
            archive, f"application name must be an atom: {name!r}"
        )
    if not isinstance(props, list):
        raise InvalidDescriptorError(archive, "application properties must be a list")

    # Unknown keys and non-pair entries are ignored
    values: dict[str, Any] = {}
    for prop in props:
        if isinstance(prop, tuple) and len(prop) == 2 and isinstance(prop[0], Atom):
            values.setdefault(prop[0], prop[1])

    version = values.get("vsn", "0")
    description = values.get("description", "")
    applications = values.get("applications", [])

    if not isinstance(version, str) or isinstance(version, Atom):
        raise InvalidDescriptorError(archive, f"'vsn' must be a string: {version!r}")
    if not isinstance(description, str) or isinstance(description, Atom):
        raise InvalidDescriptorError(
            archive, f"'description' must be a string: {description!r}"
        )
    if not isinstance(applications, list) or not all(
        isinstance(app, Atom) for app in applications
    ):
        raise InvalidDescriptorError(
            archive, f"'applications' must be a list of atoms: {applications!r}"
        )

    return Plugin(
        name=str(name),
        version=version,
        description=description,
        dependencies=frozenset(
            str(app) for app in filter_applications(applications, base_applications)
        ),
        location=archive,
    )


def get_plugin_info(archive: Path, base_applications: Iterable[str] = ()) -> Plugin:
    """
    Extract plugin metadata from an archive file.

    Args:
        archive: Path to the .ez archive
        base_applications: Names excluded from the dependency list

    Returns:
        Plugin record located at the archive

    Raises:
        ExtractionError: If the archive cannot be read or its descriptor is invalid
    """
    try:
        data = archive.read_bytes()
    except OSError as e:
        raise InvalidArchiveError(archive, f"cannot read archive: {e}") from e

    return plugin_from_term(read_app_file(data, archive), archive, base_applications)
