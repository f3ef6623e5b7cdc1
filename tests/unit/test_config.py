"""
Tests for Configuration System and Enabled Plugins Store.

This test suite covers:
1. Schema validation (type mismatch, list element types)
2. TOML read/write and generation from schema
3. Loading settings with defaults, files and overrides
4. Persisting the enabled plugin names
5. Error cases
"""

import tempfile
import tomllib
from pathlib import Path

import pytest

from ezplug.config import (
    SCHEMA,
    ConfigError,
    default_config_text,
    load_settings,
)
from ezplug.config.schema import (
    ConfigField,
    SchemaError,
    ValidationError,
    validate_config,
)
from ezplug.config.toml_handler import TOMLError, read_toml, write_toml
from ezplug.plugin.store import EnabledPluginsStore, PersistenceError


class TestSchemaValidation:
    """Test schema field validation."""

    def test_field_default_type_mismatch(self):
        """ConfigField should reject default value that doesn't match type."""
        with pytest.raises(SchemaError, match="does not match type"):
            ConfigField(int, "not an int", "Bad default")

    def test_item_type_only_for_lists(self):
        """item_type is rejected on non-list fields."""
        with pytest.raises(SchemaError, match="only supported for list"):
            ConfigField(str, "x", "Bad", item_type=str)

    def test_list_item_type(self):
        """List elements are checked against item_type."""
        field = ConfigField(list, [], "Names", item_type=str)

        field.validate(["a", "b"])
        with pytest.raises(ValidationError, match="Expected list of str"):
            field.validate(["a", 1])

    def test_validate_config_unknown_field(self):
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError, match="Unknown configuration field"):
            validate_config({"nope": 1}, SCHEMA)

    def test_validate_config_partial(self):
        """Absent keys are allowed and take defaults later."""
        validate_config({"plugins_dir": "/srv/plugins"}, SCHEMA)

    def test_validate_config_wrong_type(self):
        """Type errors name the offending field."""
        with pytest.raises(ValidationError, match="Field 'plugins_dir'"):
            validate_config({"plugins_dir": 42}, SCHEMA)


class TestTOMLHandler:
    """Test TOML file I/O operations."""

    def test_toml_read_write_roundtrip(self):
        """TOML read/write should preserve data."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "nested" / "test.toml"

            data = {"ezplug": {"plugins_dir": "p", "base_applications": ["kernel"]}}
            write_toml(config_file, data)

            assert read_toml(config_file) == data

    def test_read_missing_file(self):
        """Reading a missing file raises TOMLError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(TOMLError, match="not found"):
                read_toml(Path(tmpdir) / "missing.toml")

    def test_read_invalid_toml(self):
        """Malformed TOML raises TOMLError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "bad.toml"
            config_file.write_text("this is = = not toml")

            with pytest.raises(TOMLError, match="Failed to parse"):
                read_toml(config_file)

    def test_default_config_text(self):
        """The generated settings file has comments and every default."""
        text = default_config_text()

        assert "[ezplug]" in text
        assert "# Directory holding every available plugin archive" in text
        parsed = tomllib.loads(text)["ezplug"]
        assert parsed == {name: field.default for name, field in SCHEMA.items()}


class TestLoadSettings:
    """Test resolving settings."""

    def test_defaults_without_file(self, monkeypatch):
        """With no settings file the defaults apply."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.chdir(tmpdir)

            settings = load_settings()

            assert settings.plugins_dir == Path("plugins")
            assert settings.plugins_dist_dir == Path("plugins-dist")
            assert settings.enabled_plugins_file == Path("enabled_plugins.toml")
            assert "kernel" in settings.base_applications

    def test_file_values_relative_to_file(self):
        """Relative paths resolve against the settings file directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "ezplug.toml"
            config_file.write_text(
                "[ezplug]\n"
                'plugins_dir = "active"\n'
                'plugins_dist_dir = "/opt/dist"\n'
                'base_applications = ["kernel"]\n'
            )

            settings = load_settings(config_file)

            assert settings.plugins_dir == Path(tmpdir) / "active"
            assert settings.plugins_dist_dir == Path("/opt/dist")
            assert settings.enabled_plugins_file == Path(tmpdir) / "enabled_plugins.toml"
            assert settings.base_applications == frozenset({"kernel"})

    def test_overrides_win(self):
        """Overrides replace file values; None overrides are skipped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "ezplug.toml"
            config_file.write_text('[ezplug]\nplugins_dir = "active"\n')

            settings = load_settings(
                config_file, plugins_dir="/elsewhere", plugins_dist_dir=None
            )

            assert settings.plugins_dir == Path("/elsewhere")
            assert settings.plugins_dist_dir == Path(tmpdir) / "plugins-dist"

    def test_explicit_missing_file(self):
        """An explicitly named settings file must exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ConfigError, match="not found"):
                load_settings(Path(tmpdir) / "missing.toml")

    def test_invalid_settings(self):
        """Invalid values raise ConfigError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "ezplug.toml"
            config_file.write_text("[ezplug]\nbase_applications = [1, 2]\n")

            with pytest.raises(ConfigError, match="Invalid settings"):
                load_settings(config_file)

    def test_section_must_be_table(self):
        """The ezplug key must hold a table."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "ezplug.toml"
            config_file.write_text('ezplug = "oops"\n')

            with pytest.raises(ConfigError, match="must be a table"):
                load_settings(config_file)


class TestEnabledPluginsStore:
    """Test persisting enabled plugin names."""

    def test_missing_file_reads_empty(self):
        """A store without a file holds no names."""
        with tempfile.TemporaryDirectory() as tmpdir:
            store = EnabledPluginsStore(Path(tmpdir) / "enabled.toml")

            assert store.read() == []

    def test_write_then_read(self):
        """Written names come back sorted and deduplicated."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "enabled.toml"
            store = EnabledPluginsStore(path)

            store.write(["web", "json", "web"])

            assert store.read() == ["json", "web"]
            assert path.read_text().startswith("# Plugins enabled by ezpm")

    def test_invalid_contents(self):
        """A non-list 'plugins' value raises PersistenceError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "enabled.toml"
            path.write_text('plugins = "web"\n')

            with pytest.raises(PersistenceError, match="list of strings"):
                EnabledPluginsStore(path).read()

    def test_unparseable_file(self):
        """Malformed TOML raises PersistenceError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "enabled.toml"
            path.write_text("plugins = [")

            with pytest.raises(PersistenceError, match="Failed to read"):
                EnabledPluginsStore(path).read()

    def test_unwritable_location(self):
        """Writing below a regular file raises PersistenceError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "blocker"
            blocker.write_text("")
            store = EnabledPluginsStore(blocker / "enabled.toml")

            with pytest.raises(PersistenceError, match="Failed to write"):
                store.write(["web"])
