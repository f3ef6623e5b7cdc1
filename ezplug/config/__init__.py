"""
ezplug Configuration - TOML-based settings.

This module provides:
- The settings schema and its defaults
- Loading and validating the [ezplug] table of a settings file
- Generating a commented default settings file

Example usage:
    from ezplug.config import load_settings

    settings = load_settings(Path("ezplug.toml"), plugins_dir="/srv/plugins")
    print(settings.plugins_dist_dir)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ezplug.config.schema import (
    ConfigField,
    ValidationError,
    generate_default_config,
    validate_config,
)
from ezplug.config.toml_handler import (
    TOMLError,
    generate_toml_from_schema,
    read_toml,
)

SECTION = "ezplug"

DEFAULT_CONFIG_FILE = Path("ezplug.toml")

SCHEMA: dict[str, ConfigField] = {
    "plugins_dir": ConfigField(
        str, "plugins", "Directory holding the enabled plugin archives"
    ),
    "plugins_dist_dir": ConfigField(
        str, "plugins-dist", "Directory holding every available plugin archive"
    ),
    "enabled_plugins_file": ConfigField(
        str, "enabled_plugins.toml", "File recording the enabled plugin names"
    ),
    "base_applications": ConfigField(
        list,
        ["kernel", "stdlib", "sasl", "mnesia", "os_mon", "rabbit"],
        "Applications that are always present and never treated as plugins",
        item_type=str,
    ),
}


class ConfigError(Exception):
    """Base exception for config API errors."""

    pass


@dataclass
class Settings:
    """
    Resolved ezplug settings.

    Attributes:
        plugins_dir: Directory enabled archives are copied into
        plugins_dist_dir: Directory scanned for available archives
        enabled_plugins_file: Persisted list of enabled plugin names
        base_applications: Names never treated as plugin dependencies
    """

    plugins_dir: Path
    plugins_dist_dir: Path
    enabled_plugins_file: Path
    base_applications: frozenset[str] = field(default_factory=frozenset)


def load_settings(config_file: Path | None = None, **overrides: Any) -> Settings:
    """
    Load settings from a TOML file, applying overrides.

    A missing default settings file is not an error; an explicitly given
    one must exist. Relative paths resolve against the settings file's
    directory; override paths are used as given.

    Args:
        config_file: Settings file (defaults to ./ezplug.toml)
        **overrides: Field values taking precedence over the file (None skipped)

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file cannot be read or fails validation
    """
    explicit = config_file is not None
    config_file = config_file or DEFAULT_CONFIG_FILE

    values = generate_default_config(SCHEMA)
    if explicit or config_file.exists():
        try:
            data = read_toml(config_file)
        except TOMLError as e:
            raise ConfigError(str(e)) from e

        section = data.get(SECTION, {})
        if not isinstance(section, dict):
            raise ConfigError(f"[{SECTION}] in {config_file} must be a table")
        try:
            validate_config(section, SCHEMA)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {config_file}: {e}") from e
        values.update(section)

    base_dir = config_file.parent

    def _path(key: str) -> Path:
        if overrides.get(key) is not None:
            return Path(overrides[key])
        return base_dir / values[key]

    base_applications = overrides.get("base_applications")
    if base_applications is None:
        base_applications = values["base_applications"]

    return Settings(
        plugins_dir=_path("plugins_dir"),
        plugins_dist_dir=_path("plugins_dist_dir"),
        enabled_plugins_file=_path("enabled_plugins_file"),
        base_applications=frozenset(base_applications),
    )


def default_config_text() -> str:
    """Return a commented settings file holding every default."""
    return generate_toml_from_schema(SECTION, SCHEMA)


__all__ = [
    "ConfigError",
    "SCHEMA",
    "Settings",
    "default_config_text",
    "load_settings",
]
